"""Speech-to-text services."""

from media_pipeline.infrastructure.transcription.base import (
    TranscriptionResult,
    TranscriptionServiceBase,
)
from media_pipeline.infrastructure.transcription.openai_whisper import (
    OpenAIWhisperTranscription,
)

__all__ = [
    "TranscriptionResult",
    "TranscriptionServiceBase",
    "OpenAIWhisperTranscription",
]
