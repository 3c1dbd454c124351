"""Relay routes package."""
from .amazon import router as amazon_router
from .elevenlabs import router as elevenlabs_router
from .google import router as google_router
from .system import router as system_router

__all__ = [
    "amazon_router",
    "elevenlabs_router",
    "google_router",
    "system_router",
]
