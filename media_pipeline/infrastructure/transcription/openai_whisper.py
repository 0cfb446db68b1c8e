"""OpenAI Whisper implementation of transcription service."""

from pathlib import Path
from typing import Any, cast

from openai import AsyncOpenAI

from media_pipeline.commons.errors import ValidationError
from media_pipeline.commons.retry import retry_async
from media_pipeline.commons.settings.models import RetrySettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.openai_errors import PROVIDER, openai_errors
from media_pipeline.infrastructure.transcription.base import (
    TranscriptionResult,
    TranscriptionServiceBase,
)

# Whisper's hard request limit is 25 MB.
WHISPER_LIMIT_BYTES = 25 * 1024 * 1024


class OpenAIWhisperTranscription(TranscriptionServiceBase):
    """OpenAI Whisper API implementation of transcription service."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        max_upload_bytes: int = 20 * 1024 * 1024,
        timeout_seconds: float = 300,
        retry_policy: RetrySettings | None = None,
    ) -> None:
        """Initialize OpenAI Whisper client.

        Args:
            api_key: OpenAI API key.
            model: Whisper model to use.
            base_url: Optional custom API endpoint.
            max_upload_bytes: Split threshold reported to callers.
            timeout_seconds: Per-request timeout.
            retry_policy: Backoff policy for retryable failures.
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self._model = model
        self._max_upload_bytes = min(max_upload_bytes, WHISPER_LIMIT_BYTES)
        self._retry_policy = retry_policy
        self._logger = get_logger(__name__)

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    async def transcribe(
        self,
        audio_path: Path,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe an audio file to plain text."""
        text = await retry_async(
            lambda: self._request(audio_path, language_hint),
            policy=self._retry_policy,
            description="whisper transcription",
        )
        self._logger.debug(
            "Transcribed audio",
            extra={"file": audio_path.name, "characters": len(text)},
        )
        return TranscriptionResult(text=text, model=self._model, language=language_hint)

    async def _request(self, audio_path: Path, language_hint: str | None) -> str:
        kwargs: dict[str, Any] = {"model": self._model, "response_format": "text"}
        if language_hint:
            kwargs["language"] = language_hint

        # The SDK's overloads don't narrow on response_format="text".
        create_fn = cast("Any", self._client.audio.transcriptions.create)
        with openai_errors("whisper transcription"), audio_path.open("rb") as audio:
            response = await create_fn(file=audio, **kwargs)

        text = response if isinstance(response, str) else getattr(response, "text", None)
        if not isinstance(text, str):
            raise ValidationError(
                f"Unexpected transcription response type: {type(response).__name__}",
                provider=PROVIDER,
            )
        return text.strip()
