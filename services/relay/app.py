"""
TTS relay FastAPI application.

Forwards synthesis requests to ElevenLabs, Google Cloud TTS and Amazon Polly
with caller-supplied credentials, optionally through a caller-supplied proxy.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.config import get_settings

from .errors import PayloadTooLargeError, RelayError, ValidationRelayError
from .routes import amazon_router, elevenlabs_router, google_router, system_router

settings = get_settings()

# Configure logging with timestamps
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format,
)
logger = logging.getLogger(__name__)

# Suppress verbose HTTP client logs
logging.getLogger("aiohttp").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


class BodySizeLimitMiddleware:
    """Reject requests whose body exceeds the limit, declared or chunked.

    The body is buffered up to ``max_bytes`` and replayed to the app.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        chunks = []
        total = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body = message.get("body", b"")
            total += len(body)
            if total > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            chunks.append(body)
            more_body = message.get("more_body", False)

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": b"".join(chunks), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send):
        error = PayloadTooLargeError(f"Request body exceeds {self.max_bytes} bytes")
        logger.error(f"❌ {error.message} on {scope.get('path')}")
        response = JSONResponse(status_code=error.status_code, content=error.to_envelope())
        await response(scope, receive, send)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="Relay for ElevenLabs, Google Cloud TTS and Amazon Polly",
        version=settings.app_version,
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.request_body_limit_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.error(f"❌ Invalid request body on {request.url.path}: {exc.errors()}")
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body') or 'body'}: {err.get('msg')}"
            for err in exc.errors()
        )
        error = ValidationRelayError("Invalid request body", original_error=problems or None)
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}", exc_info=exc)
        error = RelayError("Internal server error", original_error=str(exc) or type(exc).__name__)
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())

    app.include_router(system_router, tags=["system"])
    app.include_router(elevenlabs_router, prefix="/api", tags=["elevenlabs"])
    app.include_router(google_router, prefix="/api", tags=["google"])
    app.include_router(amazon_router, prefix="/api", tags=["amazon"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Relay listening on {settings.host}:{settings.port}")
    uvicorn.run(
        "services.relay.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
