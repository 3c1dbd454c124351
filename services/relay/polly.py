"""
Amazon Polly relay using boto3 with caller-supplied credentials.
"""
import logging
from typing import Any, Callable, Dict, Iterator, Optional

import boto3.session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, InvalidRegionError
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from shared.config import get_settings
from shared.schemas import PollyTTSRequest, Provider

from .errors import UpstreamError, ValidationRelayError
from .proxies import redact_proxy
from .relay import transport_error

logger = logging.getLogger(__name__)
settings = get_settings()

PollyClientFactory = Callable[..., Any]

MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "ogg_vorbis": "audio/ogg",
    "pcm": "audio/pcm",
    "json": "application/x-json-stream",
}


def default_polly_client_factory(
    region: str,
    access_key_id: str,
    secret_access_key: str,
    proxy: Optional[str] = None,
):
    """Build a Polly client for one request; nothing is cached.

    Uses its own boto3 Session since the default session is not thread-safe.
    """
    config = Config(
        connect_timeout=settings.upstream_connect_timeout,
        read_timeout=settings.upstream_read_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
        proxies={"http": proxy, "https": proxy} if proxy else None,
    )
    session = boto3.session.Session()
    return session.client(
        "polly",
        region_name=region,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        config=config,
    )


def build_synthesize_params(request: PollyTTSRequest) -> Dict[str, Any]:
    """SynthesizeSpeech arguments; optional fields only when supplied."""
    params = {
        "OutputFormat": request.output_format or settings.polly_default_output_format,
        "Text": request.text,
        "VoiceId": request.voice_id,
    }
    optional = {
        "Engine": request.engine,
        "SampleRate": str(request.sample_rate) if request.sample_rate is not None else None,
        "TextType": request.text_type,
        "LanguageCode": request.language_code,
    }
    params.update({key: value for key, value in optional.items() if value})
    return params


def polly_client_error(e: ClientError) -> UpstreamError:
    status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 500
    error = e.response.get("Error", {})
    message = error.get("Message") or f"{Provider.AMAZON.value} API error (HTTP {status})"
    logger.error(f"❌ {Provider.AMAZON.value} API error: status={status} message={message}")
    return UpstreamError(message, status_code=status, original_error=error.get("Code") or str(e))


def invalid_region(region: str, e: Exception) -> ValidationRelayError:
    logger.error(f"❌ Invalid AWS region {region!r}: {e}")
    return ValidationRelayError(f"Invalid AWS region: {region}", original_error=str(e))


async def relay_polly_stream(
    request: PollyTTSRequest,
    client_factory: PollyClientFactory,
    proxy: Optional[str] = None,
    chunk_size: Optional[int] = None,
) -> StreamingResponse:
    """Call SynthesizeSpeech and stream the AudioStream back to the caller."""
    try:
        client = await run_in_threadpool(
            client_factory,
            region=request.region,
            access_key_id=request.access_key_id,
            secret_access_key=request.secret_access_key,
            proxy=proxy,
        )
    except (InvalidRegionError, ValueError) as e:
        # botocore rejects malformed regions as either error depending on where it fails
        raise invalid_region(request.region, e)

    params = build_synthesize_params(request)
    logger.info(
        f"🌐 Calling {Provider.AMAZON.value} API: region={request.region} "
        f"voice={request.voice_id} format={params['OutputFormat']} proxy={redact_proxy(proxy)}"
    )

    try:
        result = await run_in_threadpool(client.synthesize_speech, **params)
    except InvalidRegionError as e:
        raise invalid_region(request.region, e)
    except ClientError as e:
        raise polly_client_error(e)
    except BotoCoreError as e:
        raise transport_error(Provider.AMAZON, e)

    stream = result["AudioStream"]
    media_type = MEDIA_TYPES.get(params["OutputFormat"], result.get("ContentType") or "audio/mpeg")
    size = chunk_size or settings.relay_chunk_size

    def body_iterator() -> Iterator[bytes]:
        total = 0
        try:
            for chunk in stream.iter_chunks(size):
                total += len(chunk)
                yield chunk
            logger.info(f"✅ {Provider.AMAZON.value} API success, streamed {total} bytes")
        except BotoCoreError as e:
            logger.warning(f"{Provider.AMAZON.value} stream aborted after {total} bytes: {e}")
            raise
        finally:
            stream.close()

    return StreamingResponse(body_iterator(), media_type=media_type)
