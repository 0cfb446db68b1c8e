"""DTOs for transcript vectorization."""

from pydantic import BaseModel, Field


class VectorizationResult(BaseModel):
    """Outcome of vectorizing one entity."""

    entity_id: str
    chunks_created: int = Field(ge=0)


class VectorizationError(BaseModel):
    """A per-entity failure collected during a bulk run."""

    entity_id: str
    title: str
    error: str


class BulkVectorizationResult(BaseModel):
    """Outcome of vectorizing every entity with a transcript."""

    processed: int = Field(default=0, description="Entities vectorized")
    skipped: int = Field(default=0, description="Entities without a transcript")
    errors: list[VectorizationError] = Field(default_factory=list)


class EntityVectorizationStatus(BaseModel):
    """Indexing state of a single entity."""

    entity_id: str
    title: str
    module_title: str | None = None
    has_transcript: bool
    chunk_count: int = Field(ge=0)

    @property
    def is_vectorized(self) -> bool:
        return self.chunk_count > 0

    @property
    def needs_vectorization(self) -> bool:
        return self.has_transcript and not self.is_vectorized


class VectorizationStatus(BaseModel):
    """Indexing state across all entities."""

    entities: list[EntityVectorizationStatus] = Field(default_factory=list)
    total_chunks: int = 0

    @property
    def total_entities(self) -> int:
        return len(self.entities)

    @property
    def with_transcript(self) -> int:
        return sum(1 for entity in self.entities if entity.has_transcript)

    @property
    def vectorized(self) -> int:
        return sum(1 for entity in self.entities if entity.is_vectorized)

    @property
    def needing_vectorization(self) -> int:
        return sum(1 for entity in self.entities if entity.needs_vectorization)
