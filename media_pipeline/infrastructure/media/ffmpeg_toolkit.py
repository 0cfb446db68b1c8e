"""FFmpeg implementation of media tooling."""

import asyncio
from pathlib import Path

from PIL import Image

from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.media.base import MediaToolkitBase
from media_pipeline.infrastructure.media.process import (
    build_extract_audio_args,
    build_frame_args,
    build_split_audio_args,
    build_transcode_args,
    run_command,
)


class FFmpegMediaToolkit(MediaToolkitBase):
    """FFmpeg-based media operations.

    Requires ffmpeg to be installed and available in PATH (or configured).
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        """Initialize the toolkit.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
        """
        self._ffmpeg = ffmpeg_path
        self._logger = get_logger(__name__)

    async def extract_audio(self, video_path: Path, output_path: Path) -> Path:
        """Extract the audio track as MP3."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await run_command(build_extract_audio_args(video_path, output_path, self._ffmpeg))
        return output_path

    async def split_audio(
        self,
        audio_path: Path,
        output_dir: Path,
        segment_seconds: int = 600,
    ) -> list[Path]:
        """Split audio into fixed-duration segments."""
        output_dir.mkdir(parents=True, exist_ok=True)
        await run_command(
            build_split_audio_args(audio_path, output_dir, segment_seconds, self._ffmpeg)
        )
        segments = sorted(output_dir.glob("chunk-*.mp3"))
        self._logger.debug(
            "Split audio into segments",
            extra={"segments": len(segments), "segment_seconds": segment_seconds},
        )
        return segments

    async def transcode(self, video_path: Path, output_path: Path, quality: str) -> Path:
        """Re-encode a video to a named quality."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await run_command(
            build_transcode_args(video_path, output_path, quality, self._ffmpeg)
        )
        return output_path

    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        seek_seconds: float = 1.0,
        width: int = 640,
    ) -> Path:
        """Grab a single scaled frame."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await run_command(
            build_frame_args(video_path, output_path, seek_seconds, width, self._ffmpeg)
        )
        return output_path

    async def to_progressive_jpeg(
        self,
        source_path: Path,
        output_path: Path,
        quality: int = 85,
    ) -> Path:
        """Re-encode an image as an interlaced (progressive) JPEG."""
        loop = asyncio.get_running_loop()

        def _encode() -> None:
            with Image.open(source_path) as img:
                img.convert("RGB").save(
                    output_path,
                    format="JPEG",
                    quality=quality,
                    progressive=True,
                    optimize=True,
                )

        await loop.run_in_executor(None, _encode)
        return output_path
