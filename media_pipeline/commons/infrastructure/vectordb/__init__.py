"""Vector database abstractions and implementations."""

from media_pipeline.commons.infrastructure.vectordb.base import (
    SearchResult,
    VectorDBBase,
    VectorPoint,
)
from media_pipeline.commons.infrastructure.vectordb.qdrant_provider import (
    QdrantVectorDB,
    build_filter,
)

__all__ = [
    # Base classes
    "SearchResult",
    "VectorDBBase",
    "VectorPoint",
    # Implementations
    "QdrantVectorDB",
    "build_filter",
]
