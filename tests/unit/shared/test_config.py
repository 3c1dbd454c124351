"""Unit tests for configuration."""

import pytest
from shared.config import Settings, get_settings


class TestConfig:
    """Test configuration loading."""

    def test_get_settings(self):
        """Test getting settings."""
        settings = get_settings()
        assert settings is not None
        assert hasattr(settings, 'port')
        assert hasattr(settings, 'upstream_connect_timeout')
        assert hasattr(settings, 'forwarded_headers')

    def test_environment_variables(self):
        """Test environment variable loading."""
        settings = get_settings()
        assert settings.port == 8080
        assert settings.upstream_connect_timeout == 2
        assert settings.upstream_read_timeout == 5
        assert settings.relay_chunk_size == 4

    def test_forwarded_headers_are_lowercased(self):
        """Test header whitelist parsing."""
        settings = Settings(forwarded_headers="Content-Type, Retry-After,,X-Request-Id")
        assert settings.get_forwarded_headers() == ["content-type", "retry-after", "x-request-id"]

    def test_default_forwarded_headers_superset(self):
        """Test the default whitelist covers request id and retry-after."""
        headers = Settings().get_forwarded_headers()
        for name in ("content-type", "request-id", "retry-after"):
            assert name in headers

    def test_cors_origins(self):
        """Test CORS origin parsing."""
        settings = Settings(allowed_cors_origins="https://a.example, https://b.example")
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]
        assert Settings(allowed_cors_origins="").get_cors_origins() == []
