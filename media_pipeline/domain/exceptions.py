"""Domain exceptions for the media pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from media_pipeline.domain.models.job import JobStatus


class DomainException(Exception):
    """Base exception for domain errors."""


class MediaEntityNotFoundException(DomainException):
    """Raised when a referenced media entity does not exist."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Media entity not found: {entity_id}")


class MissingPrerequisiteException(DomainException):
    """Raised when an entity lacks the input a job type needs."""

    def __init__(self, entity_id: str, requirement: str) -> None:
        self.entity_id = entity_id
        self.requirement = requirement
        super().__init__(f"Media entity {entity_id} is missing {requirement}")


class MissingAssetException(DomainException):
    """Raised when a stored key points to an object that no longer exists."""

    def __init__(self, entity_id: str, key: str) -> None:
        self.entity_id = entity_id
        self.key = key
        super().__init__(f"Video file not found in storage: {key} (entity {entity_id})")


class JobNotFoundException(DomainException):
    """Raised when a requested job is not found."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class InvalidJobTransitionException(DomainException):
    """Raised on an illegal job status change."""

    def __init__(self, job_id: str, current: JobStatus, target: JobStatus) -> None:
        self.job_id = job_id
        self.current = current
        self.target = target
        super().__init__(
            f"Job {job_id} cannot move from {current.value} to {target.value}"
        )


class UnknownJobTypeException(DomainException):
    """Raised when no handler is registered for a job type."""

    def __init__(self, job_type: str) -> None:
        self.job_type = job_type
        super().__init__(f"Unknown job type: {job_type}")


class MediaProcessingException(DomainException):
    """Raised when a media processing stage fails."""

    def __init__(self, entity_id: str, stage: str, reason: str) -> None:
        self.entity_id = entity_id
        self.stage = stage
        self.reason = reason
        super().__init__(f"{stage} failed for media entity {entity_id}: {reason}")


class EmbeddingException(DomainException):
    """Raised when transcript vectorization fails."""

    def __init__(self, entity_id: str, reason: str) -> None:
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Embedding failed for media entity {entity_id}: {reason}")
