"""Infrastructure layer - external API and external process adapters."""

from media_pipeline.infrastructure.embeddings import (
    EmbeddingResult,
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from media_pipeline.infrastructure.factory import InfrastructureFactory
from media_pipeline.infrastructure.llm import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
    OpenAILLMService,
)
from media_pipeline.infrastructure.media import FFmpegMediaToolkit, MediaToolkitBase
from media_pipeline.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionResult,
    TranscriptionServiceBase,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    # Transcription
    "TranscriptionServiceBase",
    "TranscriptionResult",
    "OpenAIWhisperTranscription",
    # Embeddings
    "EmbeddingServiceBase",
    "EmbeddingResult",
    "OpenAIEmbeddingService",
    # LLM
    "LLMServiceBase",
    "LLMResponse",
    "LLMUsage",
    "Message",
    "MessageRole",
    "OpenAILLMService",
    # Media
    "MediaToolkitBase",
    "FFmpegMediaToolkit",
]
