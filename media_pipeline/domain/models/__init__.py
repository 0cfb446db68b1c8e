"""Domain models."""

from media_pipeline.domain.models.chunk import TextChunk, TranscriptChunk
from media_pipeline.domain.models.job import ACTIVE_STATUSES, Job, JobStatus, JobType
from media_pipeline.domain.models.media import MediaEntity

__all__ = [
    # Jobs
    "Job",
    "JobStatus",
    "JobType",
    "ACTIVE_STATUSES",
    # Media
    "MediaEntity",
    # Chunks
    "TextChunk",
    "TranscriptChunk",
]
