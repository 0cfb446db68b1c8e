"""Media entity (course lesson segment) as seen by the pipeline."""

from pydantic import BaseModel, Field


class MediaEntity(BaseModel):
    """A lesson segment that owns a source video and its derived artifacts.

    The entity table is owned by the course platform; the pipeline reads it
    and patches only ``transcript``, ``summary`` and ``thumbnail_key``.
    Quality-variant keys are derived from ``video_key``, never stored.
    """

    id: str = Field(description="Entity ID")
    title: str = Field(default="", description="Display title")
    video_key: str | None = Field(
        default=None,
        description="Object storage key of the source video",
    )
    transcript: str | None = Field(default=None)
    summary: str | None = Field(default=None)
    thumbnail_key: str | None = Field(default=None)
    module_title: str | None = Field(
        default=None,
        description="Title of the course module the entity belongs to",
    )

    @property
    def has_video(self) -> bool:
        return bool(self.video_key)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript and self.transcript.strip())

    @property
    def has_summary(self) -> bool:
        return bool(self.summary and self.summary.strip())
