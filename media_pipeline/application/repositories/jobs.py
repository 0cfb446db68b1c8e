"""Job store backed by the document database."""

from datetime import UTC, datetime
from typing import Any

from media_pipeline.commons.infrastructure.documentdb.base import DocumentDBBase
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.models.job import ACTIVE_STATUSES, Job, JobStatus, JobType

_ACTIVE_VALUES = sorted(status.value for status in ACTIVE_STATUSES)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _to_document(job: Job) -> dict[str, Any]:
    document = job.model_dump(mode="json")
    # Denormalized so a partial unique index can target active rows.
    document["active"] = job.is_active
    return document


def _from_document(document: dict[str, Any]) -> Job:
    return Job.model_validate({k: v for k, v in document.items() if k != "active"})


class JobRepository:
    """Persistence for processing jobs.

    Plain reads and writes: no validation, no retries. The only coordinated
    mutations are the conditional claim and completion updates, which rely
    on the database applying filter and write atomically.
    """

    def __init__(self, document_db: DocumentDBBase, collection: str = "jobs") -> None:
        """Initialize the repository.

        Args:
            document_db: Document database provider.
            collection: Collection holding job documents.
        """
        self._db = document_db
        self._collection = collection
        self._logger = get_logger(__name__)

    # =========================================================================
    # Setup
    # =========================================================================

    async def ensure_indexes(self, enforce_single_active: bool = False) -> None:
        """Create lookup indexes.

        Args:
            enforce_single_active: Also create a unique partial index so the
                database rejects a second active job per entity and type.
        """
        await self._db.create_index(self._collection, [("media_entity_id", 1)])
        await self._db.create_index(self._collection, [("status", 1)])
        await self._db.create_index(self._collection, [("created_at", 1)])
        await self._db.create_index(
            self._collection,
            [("media_entity_id", 1), ("job_type", 1), ("status", 1)],
        )
        if enforce_single_active:
            await self._db.create_index(
                self._collection,
                [("media_entity_id", 1), ("job_type", 1)],
                unique=True,
                name="single_active_job",
                partial_filter={"active": True},
            )
        self._logger.debug(
            "Job indexes ensured",
            extra={
                "collection": self._collection,
                "enforce_single_active": enforce_single_active,
            },
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(self, job: Job) -> Job:
        """Insert a new job.

        Raises:
            DuplicateDocumentError: If the single-active index is enabled
                and an active job of the same type already exists.
        """
        await self._db.insert(self._collection, _to_document(job))
        return job

    async def update(self, job_id: str, **fields: Any) -> bool:
        """Set arbitrary fields on a job and stamp ``updated_at``."""
        updates = {
            key: value.value if isinstance(value, JobStatus | JobType) else value
            for key, value in fields.items()
        }
        if "status" in updates:
            updates["active"] = updates["status"] in _ACTIVE_VALUES
        updates["updated_at"] = _now_iso()
        return await self._db.update(self._collection, job_id, updates)

    async def mark_processing(self, job_id: str) -> Job | None:
        """Atomically claim a pending job.

        Returns:
            The claimed job, or None if it was already claimed or deleted.
        """
        document = await self._db.find_one_and_update(
            self._collection,
            {"id": job_id, "status": JobStatus.PENDING.value},
            {
                "status": JobStatus.PROCESSING.value,
                "active": True,
                "updated_at": _now_iso(),
            },
        )
        return _from_document(document) if document else None

    async def mark_completed(self, job_id: str) -> Job | None:
        """Move a processing job to completed."""
        return await self._finish(job_id, JobStatus.COMPLETED, error=None)

    async def mark_failed(self, job_id: str, error: str) -> Job | None:
        """Move a processing job to failed, recording ``error``."""
        return await self._finish(job_id, JobStatus.FAILED, error=error)

    async def _finish(
        self, job_id: str, status: JobStatus, error: str | None
    ) -> Job | None:
        now = _now_iso()
        document = await self._db.find_one_and_update(
            self._collection,
            {"id": job_id, "status": JobStatus.PROCESSING.value},
            {
                "status": status.value,
                "active": False,
                "error": error,
                "updated_at": now,
                "completed_at": now,
            },
        )
        if document is None:
            self._logger.warning(
                "Job was not processing when finishing",
                extra={"job_id": job_id, "target_status": status.value},
            )
            return None
        return _from_document(document)

    async def delete(self, job_id: str) -> bool:
        return await self._db.delete(self._collection, job_id)

    async def delete_active(self, entity_id: str, job_type: JobType) -> list[Job]:
        """Delete pending and processing jobs of one type for an entity.

        Returns:
            The jobs that were removed.
        """
        active = await self._find(
            {
                "media_entity_id": entity_id,
                "job_type": job_type.value,
                "status": {"$in": _ACTIVE_VALUES},
            }
        )
        if active:
            await self._db.delete_many(
                self._collection, {"id": {"$in": [job.id for job in active]}}
            )
        return active

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, job_id: str) -> Job | None:
        document = await self._db.find_by_id(self._collection, job_id)
        return _from_document(document) if document else None

    async def list_by_entity(self, entity_id: str) -> list[Job]:
        """Jobs for one entity, newest first."""
        return await self._find(
            {"media_entity_id": entity_id}, sort=[("created_at", -1)]
        )

    async def list_by_entities(self, entity_ids: list[str]) -> list[Job]:
        """Jobs for many entities in one query, newest first."""
        if not entity_ids:
            return []
        return await self._find(
            {"media_entity_id": {"$in": list(entity_ids)}},
            sort=[("created_at", -1)],
        )

    async def list_by_status(
        self, status: JobStatus, limit: int | None = None
    ) -> list[Job]:
        """Jobs in ``status``, oldest first."""
        return await self._find(
            {"status": status.value}, sort=[("created_at", 1)], limit=limit
        )

    async def list_all(self) -> list[Job]:
        return await self._find({}, sort=[("created_at", -1)])

    async def has_active(self, entity_id: str, job_type: JobType) -> bool:
        count = await self._db.count(
            self._collection,
            {
                "media_entity_id": entity_id,
                "job_type": job_type.value,
                "status": {"$in": _ACTIVE_VALUES},
            },
        )
        return count > 0

    async def _find(
        self,
        filters: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        limit: int | None = None,
    ) -> list[Job]:
        documents = await self._db.find(
            self._collection, filters, limit=limit, sort=sort
        )
        return [_from_document(document) for document in documents]
