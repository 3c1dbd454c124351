"""
Outbound provider calls over aiohttp and the two response relay strategies.

``relay_audio_stream`` pipes a binary audio body to the caller chunk by chunk.
``relay_json`` reads the whole body and forwards it with whitelisted headers.
Both translate upstream and transport failures into ``RelayError``.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, Iterable, Optional, Tuple

import aiohttp
from fastapi.responses import JSONResponse, Response, StreamingResponse

from shared.config import get_settings
from shared.schemas import Provider

from .errors import TransportError, UpstreamError
from .proxies import redact_proxy

logger = logging.getLogger(__name__)
settings = get_settings()

SessionFactory = Callable[[], aiohttp.ClientSession]


@dataclass
class OutboundRequest:
    """One provider call: method, URL, credentials and body."""

    provider: Provider
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Dict[str, str]] = None
    json: Optional[Any] = None


def build_timeout() -> aiohttp.ClientTimeout:
    """Bounded connect timeout, per-read timeout so long streams keep flowing."""
    return aiohttp.ClientTimeout(
        total=None,
        sock_connect=settings.upstream_connect_timeout,
        sock_read=settings.upstream_read_timeout,
    )


def default_session_factory() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(timeout=build_timeout())


def is_success(status: int) -> bool:
    return 200 <= status < 300


def extract_error_message(body: Optional[bytes], fallback: str) -> str:
    """Best-effort human message from a provider error body.

    Structured JSON message first, then the raw body text, then ``fallback``.
    """
    if not body:
        return fallback

    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return fallback

    try:
        data = json.loads(text)
    except ValueError:
        return text

    if not isinstance(data, dict):
        return fallback

    detail = data.get("detail")
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if isinstance(detail, str) and detail:
        return detail

    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error

    if data.get("message"):
        return str(data["message"])

    return fallback


def upstream_error(provider: Provider, status: int, reason: Optional[str], body: Optional[bytes]) -> UpstreamError:
    fallback = f"{provider.value} API error (HTTP {status})"
    message = extract_error_message(body, fallback)
    logger.error(f"❌ {provider.value} API error: status={status} message={message}")
    return UpstreamError(message, status_code=status, original_error=reason or None)


def transport_error(provider: Provider, exc: BaseException) -> TransportError:
    detail = str(exc) or type(exc).__name__
    logger.error(f"❌ Failed to reach {provider.value} API: {detail}")
    return TransportError(f"Failed to reach {provider.value} API", original_error=detail)


def filter_headers(headers: Iterable[Tuple[str, str]], allowed: Iterable[str]) -> Dict[str, str]:
    """Keep only whitelisted headers, matched case-insensitively."""
    allowed = {name.lower() for name in allowed}
    return {name: value for name, value in headers if name.lower() in allowed}


async def open_upstream(
    outbound: OutboundRequest,
    session_factory: SessionFactory,
    proxy: Optional[str] = None,
) -> Tuple[aiohttp.ClientSession, aiohttp.ClientResponse]:
    """Send the request and return once response headers have arrived.

    The caller owns both returned objects and must release/close them.
    """
    logger.info(
        f"🌐 Calling {outbound.provider.value} API: {outbound.method} {outbound.url} "
        f"proxy={redact_proxy(proxy)}"
    )
    session = session_factory()
    try:
        response = await session.request(
            outbound.method,
            outbound.url,
            headers=outbound.headers,
            params=outbound.params,
            json=outbound.json,
            proxy=proxy,
        )
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        await session.close()
        raise transport_error(outbound.provider, e)
    except BaseException:
        await session.close()
        raise
    return session, response


async def _close(session: aiohttp.ClientSession, response: aiohttp.ClientResponse) -> None:
    response.release()
    await session.close()


async def relay_audio_stream(
    outbound: OutboundRequest,
    session_factory: SessionFactory,
    proxy: Optional[str] = None,
    media_type: str = "audio/mpeg",
    chunk_size: Optional[int] = None,
) -> StreamingResponse:
    """Stream a successful audio body to the caller without buffering it."""
    session, response = await open_upstream(outbound, session_factory, proxy)

    if not is_success(response.status):
        try:
            body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError):
            body = None
        finally:
            await _close(session, response)
        raise upstream_error(outbound.provider, response.status, response.reason, body)

    size = chunk_size or settings.relay_chunk_size

    async def body_iterator() -> AsyncIterator[bytes]:
        total = 0
        try:
            async for chunk in response.content.iter_chunked(size):
                total += len(chunk)
                yield chunk
            logger.info(f"✅ {outbound.provider.value} API success, streamed {total} bytes")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{outbound.provider.value} stream aborted after {total} bytes: {e}")
            raise
        finally:
            await _close(session, response)

    return StreamingResponse(body_iterator(), status_code=response.status, media_type=media_type)


async def relay_json(
    outbound: OutboundRequest,
    session_factory: SessionFactory,
    proxy: Optional[str] = None,
    allowed_headers: Optional[Iterable[str]] = None,
) -> Response:
    """Forward a provider JSON body and its whitelisted headers."""
    session, response = await open_upstream(outbound, session_factory, proxy)
    try:
        body = await response.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise transport_error(outbound.provider, e)
    finally:
        await _close(session, response)

    if not is_success(response.status):
        raise upstream_error(outbound.provider, response.status, response.reason, body)

    allowed = allowed_headers if allowed_headers is not None else settings.get_forwarded_headers()
    headers = filter_headers(response.headers.items(), allowed)

    try:
        data = json.loads(body) if body else None
    except ValueError:
        data = None

    if data is None:
        logger.warning(f"{outbound.provider.value} returned a non-JSON body, forwarding raw bytes")
        return Response(content=body, status_code=response.status, headers=headers)

    logger.info(f"✅ {outbound.provider.value} API success, status={response.status}")
    return JSONResponse(content=data, status_code=response.status, headers=headers)
