"""Transcript chunk store backed by the vector database."""

from media_pipeline.commons.infrastructure.vectordb.base import VectorDBBase, VectorPoint
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.models.chunk import TranscriptChunk


class TranscriptChunkRepository:
    """Embedded transcript chunks, one point per chunk.

    Points carry the chunk fields as payload; ``media_entity_id`` is indexed
    so per-entity deletes and counts stay cheap.
    """

    def __init__(
        self,
        vector_db: VectorDBBase,
        collection: str = "transcript_chunks",
        dimensions: int = 1536,
    ) -> None:
        """Initialize the repository.

        Args:
            vector_db: Vector database provider.
            collection: Collection holding chunk points.
            dimensions: Embedding size, used when creating the collection.
        """
        self._db = vector_db
        self._collection = collection
        self._dimensions = dimensions
        self._logger = get_logger(__name__)

    @property
    def collection(self) -> str:
        return self._collection

    async def ensure_collection(self) -> bool:
        """Create the collection if missing.

        Returns:
            True if it was created.
        """
        created = await self._db.create_collection(
            self._collection,
            vector_size=self._dimensions,
            distance_metric="cosine",
            indexed_fields=["media_entity_id"],
        )
        if created:
            self._logger.info(
                "Chunk collection created",
                extra={"collection": self._collection, "dimensions": self._dimensions},
            )
        return created

    async def delete_by_entity(self, entity_id: str) -> int:
        return await self._db.delete_by_filter(
            self._collection, {"media_entity_id": entity_id}
        )

    async def insert_many(self, chunks: list[TranscriptChunk]) -> int:
        """Store embedded chunks.

        Raises:
            ValueError: If a chunk has no embedding.
        """
        if not chunks:
            return 0
        points = []
        for chunk in chunks:
            if not chunk.embedding:
                raise ValueError(
                    f"Chunk {chunk.chunk_index} of {chunk.media_entity_id} "
                    "has no embedding"
                )
            points.append(
                VectorPoint(
                    id=chunk.id, vector=chunk.embedding, payload=chunk.to_payload()
                )
            )
        return await self._db.upsert(self._collection, points)

    async def list_by_entity(
        self, entity_id: str, with_vectors: bool = False
    ) -> list[TranscriptChunk]:
        """All chunks of an entity in transcript order."""
        points = await self._db.scroll(
            self._collection,
            filters={"media_entity_id": entity_id},
            with_vectors=with_vectors,
        )
        chunks = [
            TranscriptChunk.from_payload(point.id, point.payload, point.vector)
            for point in points
        ]
        return sorted(chunks, key=lambda chunk: chunk.chunk_index)

    async def count_by_entity(self, entity_ids: list[str]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for entity_id in entity_ids:
            counts[entity_id] = await self._db.count(
                self._collection, {"media_entity_id": entity_id}
            )
        return counts

    async def count_total(self) -> int:
        return await self._db.count(self._collection)

    async def search(
        self, vector: list[float], limit: int = 10
    ) -> list[tuple[TranscriptChunk, float]]:
        """Nearest chunks to ``vector``, most similar first."""
        results = await self._db.search(self._collection, vector, limit=limit)
        return [
            (TranscriptChunk.from_payload(result.id, result.payload), result.score)
            for result in results
        ]
