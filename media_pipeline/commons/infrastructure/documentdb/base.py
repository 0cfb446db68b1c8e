"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from media_pipeline.commons.infrastructure.blob.base import HealthStatus


class DuplicateDocumentError(Exception):
    """Raised when a write violates a unique index."""

    def __init__(self, collection: str, detail: str = "") -> None:
        self.collection = collection
        self.detail = detail
        super().__init__(f"Duplicate document in {collection}: {detail}".rstrip(": "))


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents use an ``id`` string field as their primary key; providers map
    it to whatever their native key is.
    """

    @abstractmethod
    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert.

        Returns:
            The document ID.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection name.
            document_id: Document ID to find.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters (MongoDB query syntax).
            skip: Number of documents to skip.
            limit: Maximum documents to return. None means no limit.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.

        Returns:
            First matching document or None.
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Set fields on a document.

        Args:
            collection: Collection name.
            document_id: Document ID to update.
            updates: Fields to set.

        Returns:
            True if a document matched, False if not found.
        """

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Atomically set fields on the first document matching filters.

        Used for conditional transitions such as claiming a pending job:
        the filter and the write are applied as one operation.

        Args:
            collection: Collection name.
            filters: Query filters the document must match.
            updates: Fields to set.

        Returns:
            The updated document, or None if nothing matched.
        """

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document.

        Args:
            collection: Collection name.
            document_id: Document ID to delete.

        Returns:
            True if deleted, False if not found.
        """

    @abstractmethod
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.

        Returns:
            Count of deleted documents.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters.

        Args:
            collection: Collection name.
            filters: Optional query filters.

        Returns:
            Count of matching documents.
        """

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
        partial_filter: dict[str, Any] | None = None,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: Index fields [(field, direction)].
            unique: Whether index should be unique.
            name: Optional index name.
            partial_filter: Only index documents matching this filter.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
