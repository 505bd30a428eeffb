"""Hosted Whisper STT via the OpenAI API.

Uses ``openai.AsyncOpenAI`` with ``verbose_json`` output and segment-level
timestamp granularity. SDK failures are mapped to ``TranscriptionError``
codes the admin UI can show verbatim. Dropped connections are retried once
with tenacity; timeouts are not retried.
"""

import logging

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
)
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from stoop.core.config import Settings, get_settings
from stoop.core.exceptions import TranscriptionError
from stoop.core.models import TranscriptionResult, TranscriptionSegment
from stoop.services.audio.capture import CapturedAudio
from stoop.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL = "TRANSCRIPTION_INVALID_CREDENTIAL"
QUOTA_EXCEEDED = "TRANSCRIPTION_QUOTA_EXCEEDED"
UNSUPPORTED_AUDIO = "TRANSCRIPTION_UNSUPPORTED_AUDIO"
TIMEOUT = "TRANSCRIPTION_TIMEOUT"


def _is_connection_drop(exc: BaseException) -> bool:
    # APITimeoutError subclasses APIConnectionError but must not be retried.
    return isinstance(exc, APIConnectionError) and not isinstance(exc, APITimeoutError)


def map_openai_error(exc: Exception, timeout_seconds: float = 60.0) -> TranscriptionError:
    """Translate an OpenAI SDK exception into a coded ``TranscriptionError``."""
    code = getattr(exc, "code", None)
    message = str(exc)

    if isinstance(exc, AuthenticationError) or code == "invalid_api_key":
        return TranscriptionError(
            "Invalid OpenAI API key. Please check your configuration.", INVALID_CREDENTIAL
        )
    if code == "insufficient_quota":
        return TranscriptionError(
            "OpenAI API quota exceeded. Please check your billing.", QUOTA_EXCEEDED
        )
    if isinstance(exc, APITimeoutError):
        return TranscriptionError(
            f"Transcription timed out after {timeout_seconds:g} seconds.", TIMEOUT
        )
    if "Could not process audio" in message or (
        isinstance(exc, BadRequestError) and "file format" in message.lower()
    ):
        return TranscriptionError(
            "Audio format not supported. Please try MP3, WAV, or WebM.", UNSUPPORTED_AUDIO
        )
    return TranscriptionError(f"Transcription failed: {message}")


class OpenAIWhisperSTT(BaseSTT):
    """Speech-to-text provider backed by the hosted Whisper API.

    Args:
        settings: Settings instance (defaults to get_settings()).
        client: Pre-built ``AsyncOpenAI`` client (tests inject a mock).
    """

    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings or get_settings()
        self._model = self._settings.openai_transcription_model
        self._timeout = self._settings.transcription_timeout_seconds
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._settings.openai_api_key:
                raise TranscriptionError(
                    "OPENAI_API_KEY is not set. Please check your configuration.",
                    INVALID_CREDENTIAL,
                )
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                timeout=self._timeout,
                max_retries=0,
            )
            logger.debug("Created OpenAI client")
        return self._client

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception(_is_connection_drop),
        reraise=True,
    )
    async def _call_api(self, audio: CapturedAudio, language: str | None):
        kwargs: dict = {
            "model": self._model,
            "file": (audio.filename, audio.data, audio.content_type),
            "response_format": "verbose_json",
            "timestamp_granularities": ["segment"],
        }
        if language:
            kwargs["language"] = language
        return await self._get_client().audio.transcriptions.create(**kwargs)

    async def transcribe(self, audio: CapturedAudio, language: str | None = None) -> TranscriptionResult:
        language = language or self._settings.whisper_default_language or None
        logger.info("Submitting %d bytes to %s", audio.size, self._model)
        try:
            response = await self._call_api(audio, language)
        except APIError as exc:
            logger.warning("OpenAI transcription failed: %s", exc)
            raise map_openai_error(exc, self._timeout) from exc

        segments = [
            TranscriptionSegment(text=seg.text, start=seg.start, end=seg.end)
            for seg in (getattr(response, "segments", None) or [])
        ]
        return TranscriptionResult(
            text=response.text or "",
            language=getattr(response, "language", None) or "unknown",
            duration=getattr(response, "duration", None) or 0.0,
            segments=segments,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
