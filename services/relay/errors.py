"""
Error types raised by the relay and rendered as the client-facing envelope.
"""
from typing import Any, Dict, Optional

from shared.schemas import ErrorDetail, ErrorEnvelope


class RelayError(Exception):
    """Base relay error carrying the HTTP status returned to the caller."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.original_error = original_error

    def to_envelope(self) -> Dict[str, Any]:
        """Serialize as ``{"error", "message", "detail"}``."""
        envelope = ErrorEnvelope(
            error=self.message,
            message=self.message,
            detail=ErrorDetail(
                message=self.message,
                status=self.status_code,
                originalError=self.original_error,
            ),
        )
        return envelope.model_dump()


class ValidationRelayError(RelayError):
    """The caller sent an incomplete or malformed request."""

    status_code = 400


class PayloadTooLargeError(RelayError):
    """The request body exceeds the configured limit."""

    status_code = 413


class UpstreamError(RelayError):
    """The provider answered with a non-success status."""


class TransportError(RelayError):
    """No response was received from the provider."""

    status_code = 502
