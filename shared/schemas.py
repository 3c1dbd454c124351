"""
Pydantic schemas for relay requests and error responses.
"""
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """Upstream TTS provider enumeration."""

    ELEVENLABS = "ElevenLabs"
    GOOGLE = "Google"
    AMAZON = "Amazon Polly"


class RelayRequest(BaseModel):
    """Base model for relay request bodies.

    Fields are optional at the schema level so that every missing field can be
    reported in one message; ``missing_fields`` enforces the route contract.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    required_fields: ClassVar[Tuple[str, ...]] = ()

    proxy: Optional[str] = None
    proxies: Optional[Union[List[str], str]] = None

    def missing_fields(self) -> List[str]:
        """Return the wire names of required fields that are absent or empty."""
        missing = []
        for name in self.required_fields:
            field = type(self).model_fields[name]
            value = getattr(self, name)
            if value is None or value == "" or value == []:
                missing.append(field.alias or name)
        return missing


class ElevenLabsTTSRequest(RelayRequest):
    """ElevenLabs text-to-speech request."""

    required_fields: ClassVar[Tuple[str, ...]] = ("api_key", "text", "voice_id")

    api_key: Optional[str] = Field(None, alias="apiKey")
    text: Optional[str] = None
    voice_id: Optional[str] = Field(None, alias="voiceId")
    model_id: Optional[str] = Field(
        None, alias="modelId", validation_alias=AliasChoices("modelId", "model_id")
    )
    voice_settings: Optional[Dict[str, Any]] = Field(
        None,
        alias="voiceSettings",
        validation_alias=AliasChoices("voiceSettings", "voice_settings"),
    )
    output_format: Optional[str] = Field(
        None,
        alias="outputFormat",
        validation_alias=AliasChoices("outputFormat", "output_format"),
    )


class ElevenLabsAccountRequest(RelayRequest):
    """ElevenLabs account-level request (voices, user balance)."""

    required_fields: ClassVar[Tuple[str, ...]] = ("api_key", "proxies")

    api_key: Optional[str] = Field(None, alias="apiKey")


class GoogleTTSRequest(RelayRequest):
    """Google Cloud text:synthesize request."""

    required_fields: ClassVar[Tuple[str, ...]] = ("api_key", "input", "voice", "audio_config")

    api_key: Optional[str] = Field(None, alias="apiKey")
    input: Optional[Dict[str, Any]] = None
    voice: Optional[Dict[str, Any]] = None
    audio_config: Optional[Dict[str, Any]] = Field(None, alias="audioConfig")


class PollyTTSRequest(RelayRequest):
    """Amazon Polly SynthesizeSpeech request."""

    required_fields: ClassVar[Tuple[str, ...]] = (
        "access_key_id",
        "secret_access_key",
        "region",
        "text",
        "voice_id",
    )

    access_key_id: Optional[str] = Field(None, alias="accessKeyId")
    secret_access_key: Optional[str] = Field(None, alias="secretAccessKey")
    region: Optional[str] = None
    text: Optional[str] = None
    voice_id: Optional[str] = Field(None, alias="voiceId")
    engine: Optional[str] = None
    output_format: Optional[str] = Field(None, alias="outputFormat")
    sample_rate: Optional[Union[int, str]] = Field(None, alias="sampleRate")
    text_type: Optional[str] = Field(None, alias="textType")
    language_code: Optional[str] = Field(None, alias="languageCode")


class ErrorDetail(BaseModel):
    """Nested detail block of the error envelope."""

    message: str
    status: int
    originalError: Optional[str] = None


class ErrorEnvelope(BaseModel):
    """Client-facing error body."""

    error: str
    message: str
    detail: ErrorDetail
