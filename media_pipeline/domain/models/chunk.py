"""Transcript chunk domain models."""

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """A token-bounded slice of a transcript, before embedding.

    ``start``/``end`` are character offsets of the raw slice in the source
    text; consecutive chunks share a boundary so the slices tile the whole
    source. ``text`` is the slice with surrounding whitespace removed.
    """

    index: int = Field(ge=0)
    text: str
    token_count: int = Field(ge=0)
    start: int = Field(ge=0)
    end: int = Field(ge=0)


class TranscriptChunk(BaseModel):
    """A stored, embedded transcript fragment used for semantic search."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    media_entity_id: str = Field(description="Owning media entity")
    chunk_index: int = Field(
        ge=0,
        description="0-based position in the transcript",
    )
    chunk_text: str
    token_count: int = Field(ge=0)
    embedding: list[float] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Vector store payload (everything except the vector)."""
        return {
            "media_entity_id": self.media_entity_id,
            "chunk_index": self.chunk_index,
            "chunk_text": self.chunk_text,
            "token_count": self.token_count,
        }

    @classmethod
    def from_payload(
        cls,
        point_id: str,
        payload: dict[str, Any],
        embedding: list[float] | None = None,
    ) -> "TranscriptChunk":
        return cls(
            id=point_id,
            media_entity_id=str(payload["media_entity_id"]),
            chunk_index=int(payload["chunk_index"]),
            chunk_text=str(payload.get("chunk_text", "")),
            token_count=int(payload.get("token_count", 0)),
            embedding=embedding or [],
        )
