"""DTOs for the per-entity processing status report."""

from pydantic import BaseModel, Field

from media_pipeline.domain.models.job import Job, JobType


class EntityProcessingStatus(BaseModel):
    """Artifacts and jobs of a single entity."""

    entity_id: str
    title: str
    module_title: str | None = None
    has_video: bool
    has_transcript: bool
    has_summary: bool
    has_thumbnail: bool
    variants: dict[str, bool] = Field(
        default_factory=dict,
        description="Quality name to whether its variant exists in storage",
    )
    needs_transcode: bool = False
    storage_error: str | None = Field(
        default=None,
        description="Set when the storage checks for this entity failed",
    )
    active_job_types: list[JobType] = Field(default_factory=list)
    jobs: list[Job] = Field(default_factory=list, description="Newest first")

    @property
    def has_720p(self) -> bool:
        return self.variants.get("720p", False)

    @property
    def has_480p(self) -> bool:
        return self.variants.get("480p", False)

    @property
    def needs_transcript(self) -> bool:
        return self.has_video and not self.has_transcript

    @property
    def active_transcript_job(self) -> bool:
        return JobType.TRANSCRIPT in self.active_job_types

    @property
    def active_transcode_job(self) -> bool:
        return JobType.TRANSCODE in self.active_job_types


class ProcessingStatus(BaseModel):
    """Processing state across all entities."""

    transcoding_enabled: bool
    entities: list[EntityProcessingStatus] = Field(default_factory=list)

    @property
    def total_entities(self) -> int:
        return len(self.entities)

    @property
    def with_video(self) -> int:
        return sum(1 for entity in self.entities if entity.has_video)

    @property
    def needing_transcript(self) -> int:
        return sum(1 for entity in self.entities if entity.needs_transcript)

    @property
    def needing_transcode(self) -> int:
        return sum(1 for entity in self.entities if entity.needs_transcode)
