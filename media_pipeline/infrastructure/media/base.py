"""Abstract base class for media tooling."""

from abc import ABC, abstractmethod
from pathlib import Path


class MediaToolkitBase(ABC):
    """Local media operations on files: audio, renditions and frames.

    Implementations should handle:
    - FFmpeg (subprocess)
    """

    @abstractmethod
    async def extract_audio(self, video_path: Path, output_path: Path) -> Path:
        """Extract the audio track as MP3.

        Args:
            video_path: Source video file.
            output_path: Destination MP3 file.

        Returns:
            Path to the written audio file.
        """

    @abstractmethod
    async def split_audio(
        self,
        audio_path: Path,
        output_dir: Path,
        segment_seconds: int = 600,
    ) -> list[Path]:
        """Split audio into fixed-duration segments.

        Args:
            audio_path: Source audio file.
            output_dir: Directory for the segments.
            segment_seconds: Segment duration.

        Returns:
            Segment paths in playback order.
        """

    @abstractmethod
    async def transcode(self, video_path: Path, output_path: Path, quality: str) -> Path:
        """Re-encode a video to a named quality (e.g. "720p").

        Args:
            video_path: Source video file.
            output_path: Destination MP4 file.
            quality: Target quality name.

        Returns:
            Path to the written video.
        """

    @abstractmethod
    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        seek_seconds: float = 1.0,
        width: int = 640,
    ) -> Path:
        """Grab a single scaled frame.

        Args:
            video_path: Source video file.
            output_path: Destination JPEG file.
            seek_seconds: Position of the frame.
            width: Output width; height keeps the aspect ratio.

        Returns:
            Path to the written image.
        """

    @abstractmethod
    async def to_progressive_jpeg(
        self,
        source_path: Path,
        output_path: Path,
        quality: int = 85,
    ) -> Path:
        """Re-encode an image as a progressive JPEG.

        Args:
            source_path: Source image.
            output_path: Destination JPEG.
            quality: JPEG quality (1-95).

        Returns:
            Path to the written image.
        """
