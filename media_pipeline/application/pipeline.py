"""Wiring of repositories and services from configuration."""

from dataclasses import dataclass

from media_pipeline.application.repositories.chunks import TranscriptChunkRepository
from media_pipeline.application.repositories.jobs import JobRepository
from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
    MongoMediaEntityRepository,
)
from media_pipeline.application.services.admission import JobAdmissionService
from media_pipeline.application.services.chunking import TranscriptChunker
from media_pipeline.application.services.handlers import MediaJobHandlers
from media_pipeline.application.services.search import TranscriptSearchService
from media_pipeline.application.services.transcript import (
    SummaryService,
    TranscriptService,
)
from media_pipeline.application.services.vectorization import VectorizationService
from media_pipeline.application.services.worker import JobWorker
from media_pipeline.commons.settings.models import Settings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.factory import InfrastructureFactory

logger = get_logger(__name__)


@dataclass
class Pipeline:
    """Everything a process needs to queue, run and search media jobs."""

    settings: Settings
    factory: InfrastructureFactory
    jobs: JobRepository
    entities: MediaEntityRepositoryBase
    chunks: TranscriptChunkRepository
    handlers: MediaJobHandlers
    admission: JobAdmissionService
    worker: JobWorker
    vectorization: VectorizationService
    search: TranscriptSearchService

    async def setup(self, enforce_single_active: bool = False) -> None:
        """Create indexes and the chunk collection if they are missing."""
        await self.jobs.ensure_indexes(enforce_single_active=enforce_single_active)
        await self.chunks.ensure_collection()
        logger.info("Pipeline storage ready")

    async def close(self) -> None:
        """Stop the worker and release provider connections."""
        self.worker.stop()
        await self.worker.wait_closed()
        await self.factory.close_all()


def build_pipeline(
    settings: Settings,
    factory: InfrastructureFactory | None = None,
    entities: MediaEntityRepositoryBase | None = None,
) -> Pipeline:
    """Build a pipeline from settings.

    Args:
        settings: Application settings.
        factory: Provider factory; built from ``settings`` if omitted.
        entities: Media entity access; defaults to the document database.

    Returns:
        A wired pipeline. Nothing connects until first use.
    """
    factory = factory or InfrastructureFactory(settings)
    document_db = factory.get_document_db()
    collections = settings.document_db.collections

    jobs = JobRepository(document_db, collection=collections.jobs)
    entities = entities or MongoMediaEntityRepository(
        document_db, collection=collections.media_entities
    )
    chunks = TranscriptChunkRepository(
        factory.get_vector_db(),
        collection=settings.vector_db.collections.transcript_chunks,
        dimensions=settings.embeddings.dimensions,
    )

    embeddings = factory.get_embedding_service()
    llm = factory.get_llm_service()
    toolkit = factory.get_media_toolkit()
    blob_storage = factory.get_blob_storage()

    vectorization = VectorizationService(
        entities=entities,
        chunks=chunks,
        chunker=TranscriptChunker.from_settings(settings.chunking),
        embeddings=embeddings,
        batch_size=settings.vectorization.embedding_batch_size,
    )
    handlers = MediaJobHandlers(
        blob_storage=blob_storage,
        entities=entities,
        toolkit=toolkit,
        transcripts=TranscriptService(
            toolkit=toolkit,
            transcription=factory.get_transcription_service(),
            llm=llm,
            transcription_settings=settings.transcription,
            llm_settings=settings.llm,
        ),
        summaries=SummaryService(llm, settings.llm),
        vectorization=vectorization,
        settings=settings.media,
    )

    return Pipeline(
        settings=settings,
        factory=factory,
        jobs=jobs,
        entities=entities,
        chunks=chunks,
        handlers=handlers,
        admission=JobAdmissionService(
            jobs=jobs,
            entities=entities,
            blob_storage=blob_storage,
            settings=settings.media,
        ),
        worker=JobWorker(jobs, handlers.build_registry(), settings.worker),
        vectorization=vectorization,
        search=TranscriptSearchService(
            embeddings=embeddings,
            chunks=chunks,
            entities=entities,
            default_limit=settings.vector_db.default_limit,
        ),
    )
