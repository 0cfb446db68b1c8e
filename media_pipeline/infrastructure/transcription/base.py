"""Abstract base class for transcription services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class TranscriptionResult:
    """Plain-text transcription of one audio file."""

    text: str
    model: str
    language: str | None = None


class TranscriptionServiceBase(ABC):
    """Abstract base class for speech-to-text services.

    Implementations should handle:
    - OpenAI Whisper API
    """

    @abstractmethod
    async def transcribe(
        self,
        audio_path: Path,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe an audio file to plain text.

        Args:
            audio_path: Path to the audio file.
            language_hint: Optional ISO 639-1 language code.

        Returns:
            Transcription result.

        Raises:
            RetryableError: On rate limiting or provider outages.
            FatalError: On rejected requests.
            ValidationError: If the provider returns no usable text.
        """

    @property
    @abstractmethod
    def max_upload_bytes(self) -> int:
        """Largest audio file accepted in one request."""
