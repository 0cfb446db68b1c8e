"""Job admission: decide which jobs an entity needs and queue them."""

from media_pipeline.application.dtos.processing import (
    EntityProcessingStatus,
    ProcessingStatus,
)
from media_pipeline.application.repositories.jobs import JobRepository
from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
)
from media_pipeline.commons.infrastructure.blob.base import BlobStorageBase
from media_pipeline.commons.infrastructure.blob.keys import derive_quality_key
from media_pipeline.commons.infrastructure.documentdb.base import (
    DuplicateDocumentError,
)
from media_pipeline.commons.settings.models import MediaSettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.exceptions import (
    JobNotFoundException,
    MediaEntityNotFoundException,
    MissingAssetException,
    MissingPrerequisiteException,
)
from media_pipeline.domain.models.job import Job, JobType
from media_pipeline.domain.models.media import MediaEntity

_NEEDS_TRANSCRIPT = frozenset({JobType.SUMMARY, JobType.VECTORIZE})


def _active_types(jobs: list[Job]) -> dict[str, set[JobType]]:
    active: dict[str, set[JobType]] = {}
    for job in jobs:
        if job.is_active:
            active.setdefault(job.media_entity_id, set()).add(job.job_type)
    return active


class JobAdmissionService:
    """Queues processing jobs without duplicating active ones.

    The active-job check and the insert are separate operations, so two
    concurrent callers can both pass the check. Handlers overwrite their
    artifacts, which makes such a duplicate harmless; the job store can
    additionally enforce a unique index on active jobs.
    """

    def __init__(
        self,
        jobs: JobRepository,
        entities: MediaEntityRepositoryBase,
        blob_storage: BlobStorageBase,
        settings: MediaSettings | None = None,
    ) -> None:
        """Initialize admission service.

        Args:
            jobs: Job store.
            entities: Media entity access.
            blob_storage: Object storage, probed for existing artifacts.
            settings: Which optional artifacts are enabled.
        """
        self._jobs = jobs
        self._entities = entities
        self._blob = blob_storage
        self._settings = settings or MediaSettings()
        self._logger = get_logger(__name__)

    @property
    def transcoding_enabled(self) -> bool:
        return self._settings.transcoding_enabled and self._blob.supports_transcoding

    # =========================================================================
    # Single entity
    # =========================================================================

    async def queue_job(self, entity_id: str, job_type: JobType) -> Job | None:
        """Queue one job unless an active one of the same type exists.

        Returns:
            The new pending job, or None if one was already active.

        Raises:
            MediaEntityNotFoundException: For summary or vectorize jobs on an
                unknown entity.
            MissingPrerequisiteException: For summary or vectorize jobs on
                an entity without a transcript.
        """
        if job_type in _NEEDS_TRANSCRIPT:
            entity = await self._get_entity(entity_id)
            if not entity.has_transcript:
                raise MissingPrerequisiteException(entity_id, "transcript")

        if await self._jobs.has_active(entity_id, job_type):
            self._logger.debug(
                "Job already active, not queued",
                extra={"entity_id": entity_id, "job_type": job_type.value},
            )
            return None
        return await self._create(entity_id, job_type)

    async def queue_all_job_types(self, entity_id: str) -> list[Job]:
        """Queue every job the entity is missing.

        Raises:
            MediaEntityNotFoundException: If the entity does not exist.
            MissingPrerequisiteException: If it has no video.
            MissingAssetException: If its video is not in storage.
        """
        entity = await self._get_entity(entity_id)
        if not entity.video_key:
            raise MissingPrerequisiteException(entity_id, "video")
        if not await self._blob.exists(entity.video_key):
            raise MissingAssetException(entity_id, entity.video_key)

        active = {
            job.job_type
            for job in await self._jobs.list_by_entity(entity_id)
            if job.is_active
        }
        return await self._create_all(entity, await self._missing_types(entity, active))

    async def cancel_jobs(self, entity_id: str, job_type: JobType) -> list[Job]:
        """Delete pending and processing jobs of one type.

        A job already running keeps running; its completion update then
        finds no row and is dropped.
        """
        removed = await self._jobs.delete_active(entity_id, job_type)
        if removed:
            self._logger.info(
                "Jobs cancelled",
                extra={
                    "entity_id": entity_id,
                    "job_type": job_type.value,
                    "count": len(removed),
                },
            )
        return removed

    async def list_jobs(self, entity_id: str) -> list[Job]:
        return await self._jobs.list_by_entity(entity_id)

    async def get_job(self, job_id: str) -> Job:
        job = await self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundException(job_id)
        return job

    # =========================================================================
    # Bulk
    # =========================================================================

    async def queue_missing_for_all_entities(self) -> list[Job]:
        """Scan every entity and queue whatever it is missing.

        Entities without a video are skipped. Entities whose video is gone
        from storage, or whose storage probes fail, are logged and skipped.
        """
        entities = [
            entity for entity in await self._entities.list_all() if entity.video_key
        ]
        active = await self._active_types_by_entity([entity.id for entity in entities])

        queued: list[Job] = []
        skipped = 0
        for entity in entities:
            video_key = entity.video_key or ""
            try:
                if not await self._blob.exists(video_key):
                    self._logger.warning(
                        "Video missing from storage, skipping entity",
                        extra={"entity_id": entity.id, "video_key": video_key},
                    )
                    skipped += 1
                    continue
                missing = await self._missing_types(
                    entity, active.get(entity.id, set())
                )
            except Exception as e:
                self._logger.warning(
                    "Storage check failed, skipping entity",
                    extra={"entity_id": entity.id, "error": str(e)},
                    exc_info=True,
                )
                skipped += 1
                continue
            queued.extend(await self._create_all(entity, missing))

        self._logger.info(
            "Missing jobs queued",
            extra={
                "entities": len(entities),
                "skipped": skipped,
                "queued": len(queued),
            },
        )
        return queued

    async def queue_vectorize_all(self) -> list[Job]:
        """Queue a vectorize job for every entity with a transcript."""
        entities = [
            entity
            for entity in await self._entities.list_all()
            if entity.has_transcript
        ]
        return await self._queue_for(entities, JobType.VECTORIZE)

    async def queue_missing_summaries(self) -> list[Job]:
        """Queue a summary job for every transcribed entity without a summary."""
        entities = [
            entity
            for entity in await self._entities.list_all()
            if entity.has_transcript and not entity.has_summary
        ]
        return await self._queue_for(entities, JobType.SUMMARY)

    # =========================================================================
    # Status
    # =========================================================================

    async def get_processing_status(self) -> ProcessingStatus:
        """Report artifacts and jobs for every entity.

        Jobs come from one batched lookup. Quality variants are checked in
        storage only while transcoding is enabled; a failed check is
        recorded on that entity and the report continues.
        """
        entities = await self._entities.list_all()
        jobs = await self._jobs.list_by_entities([entity.id for entity in entities])
        active = _active_types(jobs)
        jobs_by_entity: dict[str, list[Job]] = {}
        for job in jobs:
            jobs_by_entity.setdefault(job.media_entity_id, []).append(job)

        statuses = []
        for entity in entities:
            variants: dict[str, bool] = {}
            storage_error = None
            if entity.video_key and self.transcoding_enabled:
                try:
                    for quality in self._settings.qualities:
                        variants[quality] = await self._blob.exists(
                            derive_quality_key(entity.video_key, quality)
                        )
                except Exception as e:
                    self._logger.warning(
                        "Storage check failed during status report",
                        extra={"entity_id": entity.id, "error": str(e)},
                    )
                    variants = {}
                    storage_error = str(e)

            statuses.append(
                EntityProcessingStatus(
                    entity_id=entity.id,
                    title=entity.title,
                    module_title=entity.module_title,
                    has_video=entity.has_video,
                    has_transcript=entity.has_transcript,
                    has_summary=entity.has_summary,
                    has_thumbnail=entity.thumbnail_key is not None,
                    variants=variants,
                    needs_transcode=bool(variants) and not all(variants.values()),
                    storage_error=storage_error,
                    active_job_types=sorted(
                        active.get(entity.id, set()), key=lambda t: t.value
                    ),
                    jobs=jobs_by_entity.get(entity.id, []),
                )
            )

        return ProcessingStatus(
            transcoding_enabled=self.transcoding_enabled, entities=statuses
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_entity(self, entity_id: str) -> MediaEntity:
        entity = await self._entities.get(entity_id)
        if entity is None:
            raise MediaEntityNotFoundException(entity_id)
        return entity

    async def _missing_types(
        self, entity: MediaEntity, active: set[JobType]
    ) -> list[JobType]:
        """Job types whose artifact is absent and that are not already active."""
        missing: list[JobType] = []
        video_key = entity.video_key or ""

        if not entity.has_transcript and JobType.TRANSCRIPT not in active:
            missing.append(JobType.TRANSCRIPT)

        if self.transcoding_enabled and JobType.TRANSCODE not in active:
            for quality in self._settings.qualities:
                if not await self._blob.exists(derive_quality_key(video_key, quality)):
                    missing.append(JobType.TRANSCODE)
                    break

        if self._settings.thumbnails_enabled and JobType.THUMBNAIL not in active:
            if not entity.thumbnail_key or not await self._blob.exists(
                entity.thumbnail_key
            ):
                missing.append(JobType.THUMBNAIL)

        if (
            entity.has_transcript
            and not entity.has_summary
            and JobType.SUMMARY not in active
        ):
            missing.append(JobType.SUMMARY)

        return missing

    async def _active_types_by_entity(
        self, entity_ids: list[str]
    ) -> dict[str, set[JobType]]:
        return _active_types(await self._jobs.list_by_entities(entity_ids))

    async def _queue_for(
        self, entities: list[MediaEntity], job_type: JobType
    ) -> list[Job]:
        active = await self._active_types_by_entity([entity.id for entity in entities])
        queued: list[Job] = []
        for entity in entities:
            if job_type in active.get(entity.id, set()):
                continue
            job = await self._create(entity.id, job_type)
            if job is not None:
                queued.append(job)
        self._logger.info(
            "Bulk jobs queued",
            extra={
                "job_type": job_type.value,
                "candidates": len(entities),
                "queued": len(queued),
            },
        )
        return queued

    async def _create_all(
        self, entity: MediaEntity, job_types: list[JobType]
    ) -> list[Job]:
        queued = []
        for job_type in job_types:
            job = await self._create(entity.id, job_type)
            if job is not None:
                queued.append(job)
        return queued

    async def _create(self, entity_id: str, job_type: JobType) -> Job | None:
        job = Job(media_entity_id=entity_id, job_type=job_type)
        try:
            await self._jobs.create(job)
        except DuplicateDocumentError:
            self._logger.debug(
                "Active job rejected by unique index",
                extra={"entity_id": entity_id, "job_type": job_type.value},
            )
            return None
        self._logger.info(
            "Job queued",
            extra={
                "job_id": job.id,
                "entity_id": entity_id,
                "job_type": job_type.value,
            },
        )
        return job
