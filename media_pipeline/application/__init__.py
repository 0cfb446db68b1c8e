"""Application layer - use cases and orchestration.

This layer contains:
- Repositories: Jobs, media entities and transcript chunks
- Services: Admission, worker, job handlers, vectorization and search
- DTOs: Results returned to callers
"""

from media_pipeline.application.dtos import (
    BulkVectorizationResult,
    SearchHit,
    VectorizationResult,
    VectorizationStatus,
)
from media_pipeline.application.pipeline import Pipeline, build_pipeline
from media_pipeline.application.services import (
    JobAdmissionService,
    JobWorker,
    TranscriptSearchService,
    VectorizationService,
)

__all__ = [
    # DTOs
    "BulkVectorizationResult",
    "SearchHit",
    "VectorizationResult",
    "VectorizationStatus",
    # Services
    "JobAdmissionService",
    "JobWorker",
    "TranscriptSearchService",
    "VectorizationService",
    # Composition
    "Pipeline",
    "build_pipeline",
]
