"""
Configuration management for the TTS relay.
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "TTS Relay"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = Field("0.0.0.0", env="HOST")
    port: int = Field(8080, env="PORT")
    allowed_cors_origins: str = "*"
    cors_allow_credentials: bool = False
    request_body_limit_bytes: int = 2 * 1024 * 1024

    # Providers
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_default_model_id: str = "eleven_multilingual_v2"
    google_tts_base_url: str = "https://texttospeech.googleapis.com"
    polly_default_output_format: str = "mp3"

    # Outbound calls
    upstream_connect_timeout: float = 10.0
    upstream_read_timeout: float = 60.0
    relay_chunk_size: int = 8192
    forwarded_headers: str = "content-type,request-id,x-request-id,history-item-id,retry-after"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    def get_cors_origins(self) -> List[str]:
        """Parse allowed_cors_origins string into a list."""
        if not self.allowed_cors_origins:
            return []
        return [origin.strip() for origin in self.allowed_cors_origins.split(",") if origin.strip()]

    def get_forwarded_headers(self) -> List[str]:
        """Lower-cased header names copied from JSON provider responses."""
        return [h.strip().lower() for h in self.forwarded_headers.split(",") if h.strip()]

    class Config:
        env_file = BASE_DIR / ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
