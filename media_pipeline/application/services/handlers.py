"""Job handlers: one coroutine per job type."""

import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path

from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
)
from media_pipeline.application.services.transcript import (
    SummaryService,
    TranscriptService,
)
from media_pipeline.application.services.vectorization import VectorizationService
from media_pipeline.commons.errors import CommandFailedError, ProviderError
from media_pipeline.commons.infrastructure.blob.base import BlobStorageBase
from media_pipeline.commons.infrastructure.blob.keys import (
    derive_quality_key,
    derive_thumbnail_key,
)
from media_pipeline.commons.settings.models import MediaSettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.exceptions import (
    MediaEntityNotFoundException,
    MediaProcessingException,
    MissingAssetException,
    MissingPrerequisiteException,
    UnknownJobTypeException,
)
from media_pipeline.domain.models.job import JobType
from media_pipeline.domain.models.media import MediaEntity
from media_pipeline.infrastructure.media.base import MediaToolkitBase

JobHandler = Callable[[str], Awaitable[None]]


class JobHandlerRegistry:
    """Maps job types to handler coroutines."""

    def __init__(self, handlers: dict[JobType, JobHandler] | None = None) -> None:
        self._handlers: dict[JobType, JobHandler] = dict(handlers or {})

    def register(self, job_type: JobType, handler: JobHandler) -> None:
        self._handlers[job_type] = handler

    def get(self, job_type: JobType | str) -> JobHandler:
        """Look up the handler for ``job_type``.

        Raises:
            UnknownJobTypeException: If no handler is registered.
        """
        try:
            return self._handlers[JobType(job_type)]
        except (KeyError, ValueError):
            name = job_type.value if isinstance(job_type, JobType) else str(job_type)
            raise UnknownJobTypeException(name) from None

    def __contains__(self, job_type: object) -> bool:
        return job_type in self._handlers

    @property
    def job_types(self) -> list[JobType]:
        return list(self._handlers)


class MediaJobHandlers:
    """Produces the derived artifacts of a media entity.

    Every handler takes an entity ID, reads what it needs from the entity
    and storage, and writes its artifact back. Handlers overwrite existing
    artifacts, so running one twice is harmless. Scratch files live in a
    temporary directory that is removed on success and on failure.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        entities: MediaEntityRepositoryBase,
        toolkit: MediaToolkitBase,
        transcripts: TranscriptService,
        summaries: SummaryService,
        vectorization: VectorizationService,
        settings: MediaSettings | None = None,
    ) -> None:
        """Initialize handlers.

        Args:
            blob_storage: Object storage holding source videos and artifacts.
            entities: Media entity access.
            toolkit: Local media operations.
            transcripts: Transcript generation.
            summaries: Summary generation.
            vectorization: Transcript indexing.
            settings: Rendition and thumbnail options.
        """
        self._blob = blob_storage
        self._entities = entities
        self._toolkit = toolkit
        self._transcripts = transcripts
        self._summaries = summaries
        self._vectorization = vectorization
        self._settings = settings or MediaSettings()
        self._logger = get_logger(__name__)

    def build_registry(self) -> JobHandlerRegistry:
        return JobHandlerRegistry(
            {
                JobType.TRANSCRIPT: self.transcript,
                JobType.TRANSCODE: self.transcode,
                JobType.THUMBNAIL: self.thumbnail,
                JobType.SUMMARY: self.summary,
                JobType.VECTORIZE: self.vectorize,
            }
        )

    # =========================================================================
    # Handlers
    # =========================================================================

    async def transcript(self, entity_id: str) -> None:
        """Transcribe the source video and store the transcript."""
        entity = await self._get_entity(entity_id)
        video_key = await self._require_video(entity)
        video_bytes = await self._blob.get_buffer(video_key)

        try:
            text = await self._transcripts.generate(video_bytes)
        except (ProviderError, OSError) as e:
            raise MediaProcessingException(entity_id, "transcript", str(e)) from e

        await self._entities.update(entity_id, transcript=text)
        self._logger.info(
            "Transcript stored",
            extra={"entity_id": entity_id, "transcript_chars": len(text)},
        )

    async def transcode(self, entity_id: str) -> None:
        """Render every configured quality and upload each variant."""
        if not self._blob.supports_transcoding:
            raise MediaProcessingException(
                entity_id, "transcode", "storage backend does not support transcoding"
            )
        entity = await self._get_entity(entity_id)
        video_key = await self._require_video(entity)
        video_bytes = await self._blob.get_buffer(video_key)

        with tempfile.TemporaryDirectory(prefix="transcode-") as tmp:
            work_dir = Path(tmp)
            source = work_dir / "source.mp4"
            source.write_bytes(video_bytes)

            for quality in self._settings.qualities:
                stage = f"transcode {quality}"
                try:
                    output = await self._toolkit.transcode(
                        source, work_dir / f"{quality}.mp4", quality
                    )
                    variant_key = derive_quality_key(video_key, quality)
                    await self._blob.upload(
                        variant_key, output.read_bytes(), "video/mp4"
                    )
                except (CommandFailedError, OSError, ValueError) as e:
                    raise MediaProcessingException(entity_id, stage, str(e)) from e
                self._logger.info(
                    "Quality variant uploaded",
                    extra={
                        "entity_id": entity_id,
                        "quality": quality,
                        "key": variant_key,
                    },
                )

    async def thumbnail(self, entity_id: str) -> None:
        """Grab a frame, store it as a progressive JPEG and link it."""
        entity = await self._get_entity(entity_id)
        video_key = await self._require_video(entity)
        video_bytes = await self._blob.get_buffer(video_key)
        thumbnail_key = derive_thumbnail_key(video_key)

        with tempfile.TemporaryDirectory(prefix="thumbnail-") as tmp:
            work_dir = Path(tmp)
            source = work_dir / "source.mp4"
            source.write_bytes(video_bytes)
            try:
                frame = await self._toolkit.extract_frame(
                    source,
                    work_dir / "frame.jpg",
                    seek_seconds=self._settings.thumbnail_seek_seconds,
                    width=self._settings.thumbnail_width,
                )
                image = await self._toolkit.to_progressive_jpeg(
                    frame,
                    work_dir / "thumbnail.jpg",
                    quality=self._settings.thumbnail_quality,
                )
                await self._blob.upload(thumbnail_key, image.read_bytes(), "image/jpeg")
            except (CommandFailedError, OSError) as e:
                raise MediaProcessingException(entity_id, "thumbnail", str(e)) from e

        await self._entities.update(entity_id, thumbnail_key=thumbnail_key)
        self._logger.info(
            "Thumbnail stored",
            extra={"entity_id": entity_id, "key": thumbnail_key},
        )

    async def summary(self, entity_id: str) -> None:
        """Summarize the stored transcript."""
        entity = await self._get_entity(entity_id)
        if not entity.has_transcript or entity.transcript is None:
            raise MissingPrerequisiteException(entity_id, "transcript")

        try:
            summary = await self._summaries.summarize(entity.transcript)
        except ProviderError as e:
            raise MediaProcessingException(entity_id, "summary", str(e)) from e
        await self._entities.update(entity_id, summary=summary)

    async def vectorize(self, entity_id: str) -> None:
        await self._vectorization.vectorize_entity(entity_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_entity(self, entity_id: str) -> MediaEntity:
        entity = await self._entities.get(entity_id)
        if entity is None:
            raise MediaEntityNotFoundException(entity_id)
        return entity

    async def _require_video(self, entity: MediaEntity) -> str:
        if not entity.video_key:
            raise MissingPrerequisiteException(entity.id, "video")
        if not await self._blob.exists(entity.video_key):
            raise MissingAssetException(entity.id, entity.video_key)
        return entity.video_key
