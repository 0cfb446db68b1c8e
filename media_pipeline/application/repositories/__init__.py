"""Repositories for jobs, media entities and transcript chunks."""

from media_pipeline.application.repositories.chunks import TranscriptChunkRepository
from media_pipeline.application.repositories.jobs import JobRepository
from media_pipeline.application.repositories.media_entities import (
    MediaEntityRepositoryBase,
    MongoMediaEntityRepository,
)

__all__ = [
    "JobRepository",
    "MediaEntityRepositoryBase",
    "MongoMediaEntityRepository",
    "TranscriptChunkRepository",
]
