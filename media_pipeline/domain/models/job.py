"""Processing job domain model."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, Field

from media_pipeline.domain.exceptions import InvalidJobTransitionException


class JobType(str, Enum):
    """Kind of derived artifact a job produces."""

    TRANSCRIPT = "transcript"
    TRANSCODE = "transcode"
    THUMBNAIL = "thumbnail"
    SUMMARY = "summary"
    VECTORIZE = "vectorize"


class JobStatus(str, Enum):
    """Lifecycle status of a job.

    pending -> processing -> completed | failed. Terminal jobs stay terminal;
    a retry is a new job.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATUSES = frozenset({JobStatus.PENDING, JobStatus.PROCESSING})

_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(UTC)


class Job(BaseModel):
    """A unit of asynchronous work for one media entity and one job type."""

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Job UUID, assigned at creation",
    )
    media_entity_id: str = Field(description="Target media entity")
    job_type: JobType = Field(description="Which artifact to produce")
    status: JobStatus = Field(default=JobStatus.PENDING)
    error: str | None = Field(
        default=None,
        description="Failure message, set only when status is FAILED",
    )
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    completed_at: datetime | None = Field(
        default=None,
        description="Set on the transition to COMPLETED or FAILED",
    )

    @property
    def is_active(self) -> bool:
        """Pending or processing."""
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in {JobStatus.COMPLETED, JobStatus.FAILED}

    def can_transition_to(self, target: JobStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS[self.status]

    def _transition(self, target: JobStatus, **fields: Any) -> Self:
        if not self.can_transition_to(target):
            raise InvalidJobTransitionException(self.id, self.status, target)
        return self.model_copy(
            update={"status": target, "updated_at": _now(), **fields}
        )

    def mark_processing(self) -> Self:
        """Return a copy claimed for processing."""
        return self._transition(JobStatus.PROCESSING)

    def mark_completed(self) -> Self:
        """Return a copy marked completed."""
        return self._transition(JobStatus.COMPLETED, completed_at=_now(), error=None)

    def mark_failed(self, error: str) -> Self:
        """Return a copy marked failed with ``error``."""
        return self._transition(JobStatus.FAILED, completed_at=_now(), error=error)

    def to_record(self) -> dict[str, Any]:
        """Public wire shape: camelCase keys and ISO-8601 timestamps."""
        return {
            "id": self.id,
            "mediaEntityId": self.media_entity_id,
            "jobType": self.job_type.value,
            "status": self.status.value,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
