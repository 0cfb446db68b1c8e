"""Access to media entities owned by the course platform."""

from abc import ABC, abstractmethod
from typing import Any

from media_pipeline.commons.infrastructure.documentdb.base import DocumentDBBase
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.models.media import MediaEntity

# Fields the pipeline is allowed to write back.
WRITABLE_FIELDS = frozenset({"transcript", "summary", "thumbnail_key"})


class MediaEntityRepositoryBase(ABC):
    """Read and patch access to media entities.

    The pipeline never creates or deletes entities; it only fills in the
    artifacts it derives from the source video.
    """

    @abstractmethod
    async def get(self, entity_id: str) -> MediaEntity | None:
        """Get an entity by ID.

        Args:
            entity_id: Entity ID.

        Returns:
            The entity, or None if it does not exist.
        """

    @abstractmethod
    async def list_all(self) -> list[MediaEntity]:
        """List every entity."""

    @abstractmethod
    async def list_by_ids(self, entity_ids: list[str]) -> list[MediaEntity]:
        """Get many entities in one call.

        Args:
            entity_ids: Entity IDs; unknown IDs are ignored.

        Returns:
            The entities found.
        """

    @abstractmethod
    async def update(self, entity_id: str, **fields: Any) -> bool:
        """Patch derived fields on an entity.

        Args:
            entity_id: Entity ID.
            **fields: Any of ``transcript``, ``summary``, ``thumbnail_key``.

        Returns:
            True if the entity exists.

        Raises:
            ValueError: If a field outside the writable set is given.
        """


class MongoMediaEntityRepository(MediaEntityRepositoryBase):
    """Media entities stored as documents keyed by entity ID."""

    def __init__(
        self, document_db: DocumentDBBase, collection: str = "media_entities"
    ) -> None:
        self._db = document_db
        self._collection = collection
        self._logger = get_logger(__name__)

    async def get(self, entity_id: str) -> MediaEntity | None:
        document = await self._db.find_by_id(self._collection, entity_id)
        return MediaEntity.model_validate(document) if document else None

    async def list_all(self) -> list[MediaEntity]:
        documents = await self._db.find(self._collection, {}, sort=[("title", 1)])
        return [MediaEntity.model_validate(document) for document in documents]

    async def list_by_ids(self, entity_ids: list[str]) -> list[MediaEntity]:
        if not entity_ids:
            return []
        documents = await self._db.find(
            self._collection, {"id": {"$in": list(entity_ids)}}
        )
        return [MediaEntity.model_validate(document) for document in documents]

    async def update(self, entity_id: str, **fields: Any) -> bool:
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update media entity fields: {sorted(unknown)}")
        updated = await self._db.update(self._collection, entity_id, fields)
        self._logger.debug(
            "Media entity updated",
            extra={"entity_id": entity_id, "fields": sorted(fields), "found": updated},
        )
        return updated
