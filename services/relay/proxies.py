"""
Proxy descriptor handling for outbound provider calls.

A descriptor looks like ``scheme://[user:pass@]host:port``. Callers send either
a single ``proxy`` or a ``proxies`` list; a list is sampled uniformly per call.
"""
import logging
import random
import re
from typing import List, Optional, Protocol, Sequence, TypeVar, Union
from urllib.parse import urlsplit, urlunsplit

from .errors import ValidationRelayError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUPPORTED_SCHEMES = ("http", "https")

_SPLIT_RE = re.compile(r"[,\n\r]+")


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


_default_rng = random.SystemRandom()


def get_default_rng() -> RandomSource:
    """Process-wide random source used when none is injected."""
    return _default_rng


def pick(candidates: Sequence[T], rng: Optional[RandomSource] = None) -> T:
    """Pick one element uniformly at random."""
    if not candidates:
        raise ValueError("cannot pick from an empty sequence")
    return (rng or _default_rng).choice(candidates)


def normalize_proxies(value: Union[None, str, Sequence[str]]) -> List[str]:
    """Flatten a proxy list or comma/newline separated string, dropping blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        items = _SPLIT_RE.split(value)
    else:
        items = [part for item in value if item for part in _SPLIT_RE.split(str(item))]
    return [item.strip() for item in items if item and item.strip()]


def validate_proxy_url(url: str) -> str:
    """Reject descriptors the HTTP clients cannot use."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise ValidationRelayError(f"Invalid proxy URL: {redact_proxy(url)}", original_error=str(e))

    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not parts.hostname:
        raise ValidationRelayError(
            f"Invalid proxy URL: {redact_proxy(url)}",
            original_error="expected scheme://[user:pass@]host:port with http or https scheme",
        )
    return url


def redact_proxy(url: Optional[str]) -> str:
    """Hide the password part of a descriptor for logging."""
    if not url:
        return "none"
    try:
        parts = urlsplit(url)
        if parts.password is None:
            return url
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        netloc = f"{parts.username}:***@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    except ValueError:
        return "<unparseable>"


def select_proxy(
    proxy: Optional[str] = None,
    proxies: Union[None, str, Sequence[str]] = None,
    rng: Optional[RandomSource] = None,
) -> Optional[str]:
    """Choose the proxy for one outbound call, or None for a direct call.

    An explicit ``proxy`` wins over ``proxies``. Nothing is remembered between
    calls and a dead proxy is not retried.
    """
    if proxy and proxy.strip():
        return validate_proxy_url(proxy.strip())

    candidates = normalize_proxies(proxies)
    if not candidates:
        return None

    chosen = pick(candidates, rng)
    logger.debug(f"Selected proxy {redact_proxy(chosen)} from {len(candidates)} candidates")
    return validate_proxy_url(chosen)
