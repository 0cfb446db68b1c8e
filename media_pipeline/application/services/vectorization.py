"""Transcript vectorization: chunk, embed and index."""

from media_pipeline.application.dtos.vectorization import (
    BulkVectorizationResult,
    EntityVectorizationStatus,
    VectorizationError,
    VectorizationResult,
    VectorizationStatus,
)
from media_pipeline.application.repositories.chunks import TranscriptChunkRepository
from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
)
from media_pipeline.application.services.chunking import TranscriptChunker
from media_pipeline.commons.errors import ProviderError
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.exceptions import (
    EmbeddingException,
    MediaEntityNotFoundException,
    MissingPrerequisiteException,
)
from media_pipeline.domain.models.chunk import TextChunk, TranscriptChunk
from media_pipeline.infrastructure.embeddings.base import EmbeddingServiceBase


class VectorizationService:
    """Builds the searchable chunk index for entity transcripts.

    Re-vectorizing an entity replaces its chunks: existing chunks are
    deleted before new ones are written. Chunks are embedded and stored one
    batch at a time, so at most one batch of vectors is held in memory.
    """

    def __init__(
        self,
        entities: MediaEntityRepositoryBase,
        chunks: TranscriptChunkRepository,
        chunker: TranscriptChunker,
        embeddings: EmbeddingServiceBase,
        batch_size: int = 20,
    ) -> None:
        """Initialize vectorization service.

        Args:
            entities: Media entity access.
            chunks: Chunk store.
            chunker: Transcript chunker.
            embeddings: Embedding provider.
            batch_size: Chunks embedded and stored per round.
        """
        self._entities = entities
        self._chunks = chunks
        self._chunker = chunker
        self._embeddings = embeddings
        self._batch_size = max(1, batch_size)
        self._logger = get_logger(__name__)

    async def vectorize_entity(self, entity_id: str) -> VectorizationResult:
        """Replace the chunk index of one entity.

        An entity whose transcript was removed loses its old chunks before
        the missing prerequisite is reported.

        Raises:
            MediaEntityNotFoundException: If the entity does not exist.
            MissingPrerequisiteException: If it has no transcript.
            EmbeddingException: If the embedding provider fails.
        """
        entity = await self._entities.get(entity_id)
        if entity is None:
            raise MediaEntityNotFoundException(entity_id)
        if not entity.has_transcript or entity.transcript is None:
            await self.remove_entity_chunks(entity_id)
            raise MissingPrerequisiteException(entity_id, "transcript")

        removed = await self._chunks.delete_by_entity(entity_id)
        text_chunks = await self._chunker.chunk_async(entity.transcript)

        created = 0
        for start in range(0, len(text_chunks), self._batch_size):
            batch = text_chunks[start : start + self._batch_size]
            created += await self._store_batch(entity_id, batch)

        self._logger.info(
            "Entity vectorized",
            extra={
                "entity_id": entity_id,
                "chunks_removed": removed,
                "chunks_created": created,
            },
        )
        return VectorizationResult(entity_id=entity_id, chunks_created=created)

    async def remove_entity_chunks(self, entity_id: str) -> int:
        """Delete every chunk of an entity, e.g. after its transcript is cleared.

        Returns:
            Number of chunks removed.
        """
        removed = await self._chunks.delete_by_entity(entity_id)
        if removed:
            self._logger.info(
                "Entity chunks removed",
                extra={"entity_id": entity_id, "chunks_removed": removed},
            )
        return removed

    async def _store_batch(self, entity_id: str, batch: list[TextChunk]) -> int:
        try:
            results = await self._embeddings.embed_texts(
                [chunk.text for chunk in batch]
            )
        except ProviderError as e:
            raise EmbeddingException(entity_id, str(e)) from e

        stored = [
            TranscriptChunk(
                media_entity_id=entity_id,
                chunk_index=chunk.index,
                chunk_text=chunk.text,
                token_count=chunk.token_count,
                embedding=result.vector,
            )
            for chunk, result in zip(batch, results, strict=True)
        ]
        return await self._chunks.insert_many(stored)

    async def vectorize_all(self) -> BulkVectorizationResult:
        """Vectorize every entity that has a transcript.

        Entities without a transcript are skipped and lose any chunks left
        from an earlier transcript. Failures are collected per entity and
        never stop the run.
        """
        result = BulkVectorizationResult()
        for entity in await self._entities.list_all():
            if not entity.has_transcript:
                await self.remove_entity_chunks(entity.id)
                result.skipped += 1
                continue
            try:
                await self.vectorize_entity(entity.id)
            except Exception as e:
                self._logger.warning(
                    "Vectorization failed for entity",
                    extra={"entity_id": entity.id, "error": str(e)},
                )
                result.errors.append(
                    VectorizationError(
                        entity_id=entity.id, title=entity.title, error=str(e)
                    )
                )
            else:
                result.processed += 1

        self._logger.info(
            "Bulk vectorization finished",
            extra={
                "processed": result.processed,
                "skipped": result.skipped,
                "errors": len(result.errors),
            },
        )
        return result

    async def get_status(self) -> VectorizationStatus:
        """Report which entities are indexed and which still need it."""
        entities = await self._entities.list_all()
        counts = await self._chunks.count_by_entity([entity.id for entity in entities])
        return VectorizationStatus(
            entities=[
                EntityVectorizationStatus(
                    entity_id=entity.id,
                    title=entity.title,
                    module_title=entity.module_title,
                    has_transcript=entity.has_transcript,
                    chunk_count=counts.get(entity.id, 0),
                )
                for entity in entities
            ],
            total_chunks=await self._chunks.count_total(),
        )
