"""Abstract base class for text embedding services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmbeddingResult:
    """Result from embedding generation."""

    vector: list[float]
    dimensions: int
    model: str
    tokens_used: int | None = None


class EmbeddingServiceBase(ABC):
    """Abstract base class for text embedding services.

    Implementations should handle:
    - OpenAI (text-embedding-3-small/large)
    """

    @abstractmethod
    async def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Non-blank text to embed.

        Returns:
            Embedding result with vector and metadata.
        """

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for many texts in fixed-size batches.

        Args:
            texts: Non-blank texts to embed.

        Returns:
            One result per input text, in input order.

        Raises:
            ValidationError: On blank input, or if a batch response is short
                or contains an empty vector.
            RetryableError: If a batch still fails after all retries.
            FatalError: On non-retryable provider errors.
        """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Dimensions of the embedding vectors."""

    @property
    @abstractmethod
    def batch_size(self) -> int:
        """Maximum texts sent in one provider request."""
