"""Domain layer - models and exceptions."""

from media_pipeline.domain.exceptions import (
    DomainException,
    EmbeddingException,
    InvalidJobTransitionException,
    JobNotFoundException,
    MediaEntityNotFoundException,
    MediaProcessingException,
    MissingAssetException,
    MissingPrerequisiteException,
    UnknownJobTypeException,
)
from media_pipeline.domain.models import (
    ACTIVE_STATUSES,
    Job,
    JobStatus,
    JobType,
    MediaEntity,
    TextChunk,
    TranscriptChunk,
)

__all__ = [
    # Models
    "ACTIVE_STATUSES",
    "Job",
    "JobStatus",
    "JobType",
    "MediaEntity",
    "TextChunk",
    "TranscriptChunk",
    # Exceptions
    "DomainException",
    "EmbeddingException",
    "InvalidJobTransitionException",
    "JobNotFoundException",
    "MediaEntityNotFoundException",
    "MediaProcessingException",
    "MissingAssetException",
    "MissingPrerequisiteException",
    "UnknownJobTypeException",
]
