"""
Google Cloud Text-to-Speech relay route.
"""
import logging

from fastapi import APIRouter, Depends

from shared.schemas import GoogleTTSRequest

from ..dependencies import get_rng, get_session_factory, require_fields, resolve_proxy
from ..providers import build_google_synthesize
from ..proxies import RandomSource
from ..relay import SessionFactory, relay_json

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/google")
async def google_tts(
    request: GoogleTTSRequest,
    session_factory: SessionFactory = Depends(get_session_factory),
    rng: RandomSource = Depends(get_rng),
):
    """Forward a text:synthesize call; the response carries base64 audioContent."""
    require_fields(request)
    proxy = resolve_proxy(request, rng)
    return await relay_json(build_google_synthesize(request), session_factory, proxy=proxy)
