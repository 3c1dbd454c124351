"""
Liveness and debug routes.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body

from shared.config import get_settings

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "OK",
        "service": "tts_relay",
        "version": settings.app_version,
        "timestamp": _now(),
    }


@router.post("/test")
async def echo(body: Any = Body(None)):
    """Echo the received body back; handy when wiring up a client."""
    logger.info(f"🧪 Test endpoint called with: {body}")
    return {
        "message": "Backend is working!",
        "receivedData": body,
        "timestamp": _now(),
    }
