"""Semantic search over transcript chunks."""

from media_pipeline.application.dtos.search import SearchHit
from media_pipeline.application.repositories.chunks import TranscriptChunkRepository
from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
)
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.embeddings.base import EmbeddingServiceBase


class TranscriptSearchService:
    """Nearest-neighbour search over indexed transcript chunks.

    Queries are embedded with the same provider used for indexing.
    """

    def __init__(
        self,
        embeddings: EmbeddingServiceBase,
        chunks: TranscriptChunkRepository,
        entities: MediaEntityRepositoryBase,
        default_limit: int = 10,
    ) -> None:
        self._embeddings = embeddings
        self._chunks = chunks
        self._entities = entities
        self._default_limit = default_limit
        self._logger = get_logger(__name__)

    async def search(self, query: str, limit: int | None = None) -> list[SearchHit]:
        """Find the chunks most similar to ``query``.

        Args:
            query: Free-text query. Blank queries return no hits.
            limit: Maximum hits; defaults to the configured limit.

        Returns:
            Hits ordered by descending similarity.
        """
        if not query or not query.strip():
            return []

        embedding = await self._embeddings.embed_text(query.strip())
        matches = await self._chunks.search(
            embedding.vector, limit=limit or self._default_limit
        )

        entity_ids = list(dict.fromkeys(chunk.media_entity_id for chunk, _ in matches))
        entities = {
            entity.id: entity for entity in await self._entities.list_by_ids(entity_ids)
        }

        hits = []
        for chunk, score in matches:
            entity = entities.get(chunk.media_entity_id)
            hits.append(
                SearchHit(
                    chunk_id=chunk.id,
                    media_entity_id=chunk.media_entity_id,
                    entity_title=entity.title if entity else None,
                    module_title=entity.module_title if entity else None,
                    chunk_index=chunk.chunk_index,
                    chunk_text=chunk.chunk_text,
                    similarity=score,
                )
            )

        self._logger.debug(
            "Transcript search finished",
            extra={"query_chars": len(query), "hits": len(hits)},
        )
        return hits
