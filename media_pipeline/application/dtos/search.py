"""DTOs for transcript search."""

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """A transcript chunk matching a search query."""

    chunk_id: str
    media_entity_id: str
    entity_title: str | None = Field(
        default=None,
        description="Title of the owning entity, when it still exists",
    )
    module_title: str | None = None
    chunk_index: int = Field(ge=0)
    chunk_text: str
    similarity: float = Field(description="Cosine similarity to the query")
