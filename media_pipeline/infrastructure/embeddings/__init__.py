"""Text embedding services."""

from media_pipeline.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)
from media_pipeline.infrastructure.embeddings.openai_embeddings import (
    OpenAIEmbeddingService,
)

__all__ = [
    "EmbeddingResult",
    "EmbeddingServiceBase",
    "OpenAIEmbeddingService",
]
