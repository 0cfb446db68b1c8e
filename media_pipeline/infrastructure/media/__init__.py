"""Media tooling: external-process wrappers around ffmpeg and Pillow."""

from media_pipeline.infrastructure.media.base import MediaToolkitBase
from media_pipeline.infrastructure.media.ffmpeg_toolkit import FFmpegMediaToolkit
from media_pipeline.infrastructure.media.process import (
    QUALITY_HEIGHTS,
    CommandResult,
    build_extract_audio_args,
    build_frame_args,
    build_split_audio_args,
    build_transcode_args,
    run_command,
)

__all__ = [
    # Base classes
    "MediaToolkitBase",
    # Implementations
    "FFmpegMediaToolkit",
    # Process helpers
    "CommandResult",
    "QUALITY_HEIGHTS",
    "run_command",
    "build_extract_audio_args",
    "build_frame_args",
    "build_split_audio_args",
    "build_transcode_args",
]
