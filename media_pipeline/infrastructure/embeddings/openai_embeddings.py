"""OpenAI implementation of text embedding service."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from typing import ClassVar

from openai import AsyncOpenAI

from media_pipeline.commons.errors import ValidationError
from media_pipeline.commons.retry import retry_async
from media_pipeline.commons.settings.models import RetrySettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)
from media_pipeline.infrastructure.openai_errors import PROVIDER, openai_errors

Sleep = Callable[[float], Awaitable[None]]


class OpenAIEmbeddingService(EmbeddingServiceBase):
    """OpenAI implementation of text embedding service.

    Texts are sent in batches of ``batch_size``; each batch is retried with
    exponential backoff on rate limits and server errors, and validated
    before its vectors are returned.
    """

    _MODEL_DIMENSIONS: ClassVar[dict[str, int]] = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }
    _MAX_BATCH_SIZE: ClassVar[int] = 2048

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str | None = None,
        batch_size: int = 100,
        retry_policy: RetrySettings | None = None,
        client: AsyncOpenAI | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key.
            model: Embedding model to use.
            base_url: Optional custom API endpoint.
            batch_size: Texts per request (at most 2048).
            retry_policy: Backoff policy for retryable failures.
            client: Pre-built client, mainly for tests.
            sleep: Replacement for ``asyncio.sleep`` between retries.
        """
        # Retries are handled here, not by the SDK.
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, max_retries=0
        )
        self._model = model
        self._dimensions = self._MODEL_DIMENSIONS.get(model, 1536)
        self._batch_size = max(1, min(batch_size, self._MAX_BATCH_SIZE))
        self._retry_policy = retry_policy or RetrySettings()
        self._sleep = sleep or asyncio.sleep
        self._logger = get_logger(__name__)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text."""
        return (await self.embed_texts([text]))[0]

    async def embed_texts(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for many texts in fixed-size batches."""
        if not texts:
            return []

        for i, text in enumerate(texts):
            if not isinstance(text, str) or not text.strip():
                raise ValidationError(
                    f"Text at index {i} is empty; embeddings need non-blank input",
                    provider=PROVIDER,
                )

        results: list[EmbeddingResult] = []
        total_batches = (len(texts) + self._batch_size - 1) // self._batch_size
        for batch_number, start in enumerate(range(0, len(texts), self._batch_size), 1):
            batch = texts[start : start + self._batch_size]
            batch_results = await retry_async(
                partial(self._embed_batch, batch),
                policy=self._retry_policy,
                description=f"embedding batch {batch_number}/{total_batches}",
                sleep=self._sleep,
            )
            results.extend(batch_results)

        return results

    async def _embed_batch(self, batch: list[str]) -> list[EmbeddingResult]:
        with openai_errors("embedding request"):
            response = await self._client.embeddings.create(
                model=self._model,
                input=batch,
            )

        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(batch):
            raise ValidationError(
                f"Embedding count mismatch: sent {len(batch)} texts, "
                f"received {len(data)} vectors",
                provider=PROVIDER,
            )
        for position, item in enumerate(data):
            if not item.embedding:
                raise ValidationError(
                    f"Empty embedding returned for batch item {position}",
                    provider=PROVIDER,
                )

        tokens_per_item = None
        if response.usage:
            tokens_per_item = response.usage.total_tokens // len(batch)

        return [
            EmbeddingResult(
                vector=list(item.embedding),
                dimensions=len(item.embedding),
                model=self._model,
                tokens_used=tokens_per_item,
            )
            for item in data
        ]
