"""Abstract base class for vector database operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

from media_pipeline.commons.infrastructure.blob.base import HealthStatus


@dataclass
class VectorPoint:
    """A vector with its ID and payload."""

    id: str
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResult:
    """Result from a vector search."""

    id: str
    score: float
    payload: dict[str, Any]


class VectorDBBase(ABC):
    """Abstract base class for vector database operations.

    Filters are plain dicts: ``{"field": value}`` for equality,
    ``{"field": {"$in": [...]}}`` for membership and ``$gt``/``$gte``/
    ``$lt``/``$lte`` for ranges.
    """

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        vector_size: int,
        distance_metric: Literal["cosine", "euclidean", "dot"] = "cosine",
        indexed_fields: list[str] | None = None,
    ) -> bool:
        """Create a new collection.

        Args:
            name: Collection name.
            vector_size: Dimension of vectors.
            distance_metric: Similarity metric.
            indexed_fields: Payload fields to index for filtering.

        Returns:
            True if created, False if already exists.
        """

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        """Check if collection exists."""

    @abstractmethod
    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        """Insert or update vectors.

        Args:
            collection: Collection name.
            points: Vectors with IDs and payloads.

        Returns:
            Count of upserted points.
        """

    @abstractmethod
    async def search(
        self,
        collection: str,
        query_vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Args:
            collection: Collection name.
            query_vector: Query embedding.
            limit: Maximum results to return.
            filters: Optional payload filters.
            score_threshold: Minimum similarity score.

        Returns:
            Results sorted by descending similarity.
        """

    @abstractmethod
    async def scroll(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        batch_size: int = 256,
        with_vectors: bool = False,
    ) -> list[VectorPoint]:
        """Read every point matching filters, in pages of ``batch_size``.

        Args:
            collection: Collection name.
            filters: Optional payload filters.
            batch_size: Page size for each request.
            with_vectors: Whether to return vectors (empty list otherwise).

        Returns:
            All matching points.
        """

    @abstractmethod
    async def delete_by_filter(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete vectors matching filter.

        Args:
            collection: Collection name.
            filters: Payload filters to match.

        Returns:
            Count of deleted vectors.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count vectors in collection, optionally filtered."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""
