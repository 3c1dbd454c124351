"""
ElevenLabs relay routes.
"""
import logging

from fastapi import APIRouter, Depends

from shared.schemas import ElevenLabsAccountRequest, ElevenLabsTTSRequest

from ..dependencies import get_rng, get_session_factory, require_fields, resolve_proxy
from ..providers import (
    build_elevenlabs_tts,
    build_elevenlabs_user,
    build_elevenlabs_voices,
    elevenlabs_media_type,
)
from ..proxies import RandomSource, redact_proxy
from ..relay import SessionFactory, relay_audio_stream, relay_json

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/elevenlabs")
@router.post("/generate")
async def elevenlabs_tts(
    request: ElevenLabsTTSRequest,
    session_factory: SessionFactory = Depends(get_session_factory),
    rng: RandomSource = Depends(get_rng),
):
    """Synthesize speech with ElevenLabs and stream the audio back."""
    logger.info(
        "📥 ElevenLabs request received: "
        f"hasApiKey={bool(request.api_key)} textLength={len(request.text or '')} "
        f"voiceId={request.voice_id} modelId={request.model_id} "
        f"hasProxy={bool(request.proxy or request.proxies)}"
    )
    require_fields(request)
    proxy = resolve_proxy(request, rng)

    outbound = build_elevenlabs_tts(request)
    logger.info(
        f"ElevenLabs TTS: model={outbound.json['model_id']} "
        f"hasVoiceSettings={'voice_settings' in outbound.json} proxy={redact_proxy(proxy)}"
    )
    return await relay_audio_stream(
        outbound,
        session_factory,
        proxy=proxy,
        media_type=elevenlabs_media_type(request.output_format),
    )


@router.post("/voices")
async def elevenlabs_voices(
    request: ElevenLabsAccountRequest,
    session_factory: SessionFactory = Depends(get_session_factory),
    rng: RandomSource = Depends(get_rng),
):
    """List the voices available to the caller's ElevenLabs account."""
    require_fields(request)
    proxy = resolve_proxy(request, rng)
    return await relay_json(build_elevenlabs_voices(request.api_key), session_factory, proxy=proxy)


@router.post("/user/balance")
async def elevenlabs_user_balance(
    request: ElevenLabsAccountRequest,
    session_factory: SessionFactory = Depends(get_session_factory),
    rng: RandomSource = Depends(get_rng),
):
    """Fetch ElevenLabs user info, including subscription character balance."""
    require_fields(request)
    proxy = resolve_proxy(request, rng)
    return await relay_json(build_elevenlabs_user(request.api_key), session_factory, proxy=proxy)
