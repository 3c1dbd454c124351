"""
Amazon Polly relay route.
"""
import logging

from fastapi import APIRouter, Depends

from shared.schemas import PollyTTSRequest

from ..dependencies import get_polly_client_factory, get_rng, require_fields, resolve_proxy
from ..polly import PollyClientFactory, relay_polly_stream
from ..proxies import RandomSource

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/amazon")
async def amazon_tts(
    request: PollyTTSRequest,
    client_factory: PollyClientFactory = Depends(get_polly_client_factory),
    rng: RandomSource = Depends(get_rng),
):
    """Synthesize speech with Polly and stream the audio back."""
    logger.info(
        "📥 Polly request received: "
        f"hasCredentials={bool(request.access_key_id and request.secret_access_key)} "
        f"region={request.region} voiceId={request.voice_id} textLength={len(request.text or '')}"
    )
    require_fields(request)
    proxy = resolve_proxy(request, rng)
    return await relay_polly_stream(request, client_factory, proxy=proxy)
