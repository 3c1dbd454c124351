"""Pytest configuration and fixtures."""

import os
import pytest
import boto3
from moto import mock_aws
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from multidict import CIMultiDict

# Set test environment variables
os.environ["PORT"] = "8080"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["UPSTREAM_CONNECT_TIMEOUT"] = "2"
os.environ["UPSTREAM_READ_TIMEOUT"] = "5"
os.environ["RELAY_CHUNK_SIZE"] = "4"


@dataclass
class RecordedCall:
    """An outbound request captured by the fake session."""

    method: str
    url: str
    headers: Dict[str, str]
    params: Optional[Dict[str, str]]
    json: Any
    proxy: Optional[str]


class FakeContent:
    """Stand-in for aiohttp's StreamReader."""

    def __init__(self, body: bytes, error: Optional[BaseException] = None):
        self._body = body
        self._error = error

    async def iter_chunked(self, n: int):
        for i in range(0, len(self._body), n):
            yield self._body[i:i + n]
        if self._error is not None:
            raise self._error


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int, body: bytes, headers: Dict[str, str], reason: str, stream_error=None):
        self.status = status
        self.reason = reason
        self.headers = CIMultiDict(headers)
        self._body = body
        self.content = FakeContent(body, stream_error)
        self.released = False

    async def read(self) -> bytes:
        return self._body

    def release(self):
        self.released = True


class FakeSession:
    """Stand-in for aiohttp.ClientSession that records every request."""

    def __init__(self, upstream: "FakeUpstream"):
        self.upstream = upstream
        self.closed = False

    async def request(self, method, url, headers=None, params=None, json=None, proxy=None):
        self.upstream.calls.append(
            RecordedCall(method=method, url=url, headers=dict(headers or {}), params=params, json=json, proxy=proxy)
        )
        if self.upstream.error is not None:
            raise self.upstream.error
        response = self.upstream.make_response()
        self.upstream.responses.append(response)
        return response

    async def close(self):
        self.closed = True


@dataclass
class FakeUpstream:
    """Scripted provider: configure with ``respond`` or ``fail``."""

    status: int = 200
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    reason: str = "OK"
    error: Optional[BaseException] = None
    stream_error: Optional[BaseException] = None
    calls: List[RecordedCall] = field(default_factory=list)
    sessions: List[FakeSession] = field(default_factory=list)
    responses: List[FakeResponse] = field(default_factory=list)

    def respond(self, status=200, body=b"", headers=None, reason="OK", stream_error=None):
        self.status = status
        self.body = body
        self.headers = headers or {}
        self.reason = reason
        self.stream_error = stream_error
        self.error = None
        return self

    def fail(self, error: BaseException):
        self.error = error
        return self

    def make_response(self) -> FakeResponse:
        return FakeResponse(self.status, self.body, self.headers, self.reason, self.stream_error)

    def factory(self) -> FakeSession:
        session = FakeSession(self)
        self.sessions.append(session)
        return session


class FixedChoice:
    """Deterministic random source that always picks the same index."""

    def __init__(self, index: int = 0):
        self.index = index
        self.seen = []

    def choice(self, seq):
        self.seen.append(list(seq))
        return seq[self.index]


@pytest.fixture
def upstream():
    """Provide a scripted provider stub."""
    return FakeUpstream()


@pytest.fixture
def fixed_rng():
    """Provide a random source that always picks the first candidate."""
    return FixedChoice(0)


@pytest.fixture
def relay_app(upstream, fixed_rng):
    """Relay app with the outbound session and random source overridden."""
    from services.relay.app import app
    from services.relay.dependencies import get_rng, get_session_factory

    app.dependency_overrides[get_session_factory] = lambda: upstream.factory
    app.dependency_overrides[get_rng] = lambda: fixed_rng
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(relay_app):
    """Provide a test API client."""
    from fastapi.testclient import TestClient
    with TestClient(relay_app) as client:
        yield client


@pytest.fixture
def aws_mock():
    """Route every boto3 call to moto's in-memory AWS."""
    with mock_aws():
        yield


@pytest.fixture
def polly_client(aws_mock):
    """Provide a mock Polly client."""
    yield boto3.client(
        "polly",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
