"""MongoDB implementation of document database."""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from media_pipeline.commons.infrastructure.blob.base import HealthStatus
from media_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DuplicateDocumentError,
)


def _to_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Store the domain ``id`` as MongoDB's ``_id``."""
    doc = dict(document)
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(document: dict[str, Any] | None) -> dict[str, Any] | None:
    """Restore ``id`` from ``_id``."""
    if document is None:
        return None
    doc = dict(document)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations.
    """

    def __init__(self, connection_string: str, database_name: str) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        """Insert a document, using its ``id`` as ``_id``."""
        try:
            result = await self._db[collection].insert_one(_to_mongo(document))
        except DuplicateKeyError as e:
            raise DuplicateDocumentError(collection, str(e.details or e)) from e
        return str(result.inserted_id)

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID."""
        doc = await self._db[collection].find_one({"_id": document_id})
        return _from_mongo(doc)

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters."""
        cursor = self._db[collection].find(_to_mongo(filters))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)

        results: list[dict[str, Any]] = []
        async for doc in cursor:
            restored = _from_mongo(doc)
            if restored is not None:
                results.append(restored)
        return results

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters."""
        doc = await self._db[collection].find_one(_to_mongo(filters))
        return _from_mongo(doc)

    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Set fields on a document."""
        fields = {key: value for key, value in updates.items() if key != "id"}
        result = await self._db[collection].update_one(
            {"_id": document_id},
            {"$set": fields},
        )
        return bool(result.matched_count > 0)

    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Atomically set fields on the first matching document."""
        fields = {key: value for key, value in updates.items() if key != "id"}
        doc = await self._db[collection].find_one_and_update(
            _to_mongo(filters),
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(doc)

    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document."""
        result = await self._db[collection].delete_one({"_id": document_id})
        return bool(result.deleted_count > 0)

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete documents matching filters."""
        result = await self._db[collection].delete_many(_to_mongo(filters))
        return int(result.deleted_count)

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""
        if filters:
            return int(
                await self._db[collection].count_documents(_to_mongo(filters))
            )
        return int(await self._db[collection].estimated_document_count())

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
        partial_filter: dict[str, Any] | None = None,
    ) -> str:
        """Create an index on the collection."""
        options: dict[str, Any] = {"unique": unique}
        if name:
            options["name"] = name
        if partial_filter:
            options["partialFilterExpression"] = partial_filter
        return str(await self._db[collection].create_index(fields, **options))

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
        except Exception as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="MongoDB is healthy",
            details={"database": self._database_name},
        )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
