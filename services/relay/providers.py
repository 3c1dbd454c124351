"""
Outbound request builders for the HTTP-based providers.
"""
from typing import Optional
from urllib.parse import quote

from shared.config import get_settings
from shared.schemas import ElevenLabsTTSRequest, GoogleTTSRequest, Provider

from .relay import OutboundRequest

settings = get_settings()

ELEVENLABS_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "pcm": "audio/pcm",
    "ulaw": "audio/basic",
    "alaw": "audio/x-alaw-basic",
    "opus": "audio/opus",
    "wav": "audio/wav",
}


def elevenlabs_media_type(output_format: Optional[str]) -> str:
    """Map an output_format such as ``pcm_16000`` to its MIME type; mp3 by default."""
    if not output_format:
        return "audio/mpeg"
    codec = output_format.split("_", 1)[0].lower()
    return ELEVENLABS_MEDIA_TYPES.get(codec, "audio/mpeg")


def _elevenlabs_headers(api_key: str, accept: str = "application/json") -> dict:
    return {
        "xi-api-key": api_key,
        "Content-Type": "application/json",
        "Accept": accept,
    }


def build_elevenlabs_tts(request: ElevenLabsTTSRequest) -> OutboundRequest:
    """POST /v1/text-to-speech/{voice_id}."""
    voice_id = quote(request.voice_id, safe="")
    payload = {
        "text": request.text,
        "model_id": request.model_id or settings.elevenlabs_default_model_id,
    }
    if request.voice_settings is not None:
        payload["voice_settings"] = request.voice_settings

    params = None
    if request.output_format:
        params = {"output_format": request.output_format}

    return OutboundRequest(
        provider=Provider.ELEVENLABS,
        method="POST",
        url=f"{settings.elevenlabs_base_url}/v1/text-to-speech/{voice_id}",
        headers=_elevenlabs_headers(request.api_key, accept=elevenlabs_media_type(request.output_format)),
        params=params,
        json=payload,
    )


def build_elevenlabs_voices(api_key: str) -> OutboundRequest:
    return OutboundRequest(
        provider=Provider.ELEVENLABS,
        method="GET",
        url=f"{settings.elevenlabs_base_url}/v1/voices",
        headers=_elevenlabs_headers(api_key),
    )


def build_elevenlabs_user(api_key: str) -> OutboundRequest:
    return OutboundRequest(
        provider=Provider.ELEVENLABS,
        method="GET",
        url=f"{settings.elevenlabs_base_url}/v1/user",
        headers=_elevenlabs_headers(api_key),
    )


def build_google_synthesize(request: GoogleTTSRequest) -> OutboundRequest:
    """POST /v1/text:synthesize with the API key as a query parameter."""
    return OutboundRequest(
        provider=Provider.GOOGLE,
        method="POST",
        url=f"{settings.google_tts_base_url}/v1/text:synthesize",
        headers={"Content-Type": "application/json"},
        params={"key": request.api_key},
        json={
            "input": request.input,
            "voice": request.voice,
            "audioConfig": request.audio_config,
        },
    )
