"""Data Transfer Objects for application layer."""

from media_pipeline.application.dtos.processing import (
    EntityProcessingStatus,
    ProcessingStatus,
)
from media_pipeline.application.dtos.search import SearchHit
from media_pipeline.application.dtos.vectorization import (
    BulkVectorizationResult,
    EntityVectorizationStatus,
    VectorizationError,
    VectorizationResult,
    VectorizationStatus,
)

__all__ = [
    # Processing status DTOs
    "EntityProcessingStatus",
    "ProcessingStatus",
    # Search DTOs
    "SearchHit",
    # Vectorization DTOs
    "BulkVectorizationResult",
    "EntityVectorizationStatus",
    "VectorizationError",
    "VectorizationResult",
    "VectorizationStatus",
]
