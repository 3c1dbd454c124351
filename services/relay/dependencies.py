"""
Injectable collaborators for the relay routes.

Routes receive these through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""
import logging
from typing import Optional

from shared.schemas import RelayRequest

from .errors import ValidationRelayError
from .polly import PollyClientFactory, default_polly_client_factory
from .proxies import RandomSource, get_default_rng, normalize_proxies, select_proxy
from .relay import SessionFactory, default_session_factory

logger = logging.getLogger(__name__)


def get_session_factory() -> SessionFactory:
    return default_session_factory


def get_polly_client_factory() -> PollyClientFactory:
    return default_polly_client_factory


def get_rng() -> RandomSource:
    return get_default_rng()


def require_fields(request: RelayRequest) -> None:
    """Fail fast with a 400 before any outbound call is attempted."""
    missing = request.missing_fields()
    if "proxies" in request.required_fields and "proxies" not in missing and not normalize_proxies(request.proxies):
        missing.append("proxies")
    if missing:
        logger.error(f"❌ Missing required params: {missing}")
        raise ValidationRelayError(f"Missing required parameters: {', '.join(missing)}")


def resolve_proxy(request: RelayRequest, rng: RandomSource) -> Optional[str]:
    return select_proxy(proxy=request.proxy, proxies=request.proxies, rng=rng)
