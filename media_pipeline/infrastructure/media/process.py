"""External command execution and ffmpeg argument builders.

Commands are argument lists and never go through a shell. The ``build_*``
functions only assemble arguments.
"""

import asyncio
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from media_pipeline.commons.errors import CommandFailedError

# Output height per named quality.
QUALITY_HEIGHTS: dict[str, int] = {
    "1080p": 1080,
    "720p": 720,
    "480p": 480,
    "360p": 360,
}

_MISSING_BINARY_STATUS = 127


@dataclass
class CommandResult:
    """Captured output of a finished command."""

    args: list[str]
    returncode: int
    stdout: bytes
    stderr: bytes


async def run_command(args: Sequence[str]) -> CommandResult:
    """Run a command off the event loop and capture its output.

    Raises:
        CommandFailedError: On non-zero exit, or if the binary is missing.
    """
    argv = [str(arg) for arg in args]
    loop = asyncio.get_running_loop()
    try:
        completed = await loop.run_in_executor(
            None,
            lambda: subprocess.run(argv, capture_output=True, check=False),
        )
    except FileNotFoundError as e:
        raise CommandFailedError(argv, _MISSING_BINARY_STATUS, str(e)) from e

    if completed.returncode != 0:
        raise CommandFailedError(
            argv,
            completed.returncode,
            completed.stderr.decode("utf-8", errors="replace"),
        )
    return CommandResult(
        args=argv,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def build_extract_audio_args(
    video_path: Path,
    output_path: Path,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    """Video -> 128 kbps 44.1 kHz MP3 audio track."""
    return [
        ffmpeg,
        "-i",
        str(video_path),
        "-vn",
        "-acodec",
        "libmp3lame",
        "-ab",
        "128k",
        "-ar",
        "44100",
        "-y",
        str(output_path),
    ]


def build_split_audio_args(
    audio_path: Path,
    output_dir: Path,
    segment_seconds: int = 600,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    """Split audio into fixed-length segments named ``chunk-000.mp3``, ..."""
    return [
        ffmpeg,
        "-i",
        str(audio_path),
        "-f",
        "segment",
        "-segment_time",
        str(segment_seconds),
        "-c",
        "copy",
        "-reset_timestamps",
        "1",
        "-y",
        str(output_dir / "chunk-%03d.mp3"),
    ]


def build_transcode_args(
    video_path: Path,
    output_path: Path,
    quality: str,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    """H.264/AAC re-encode scaled to the quality's height, width kept even."""
    try:
        height = QUALITY_HEIGHTS[quality]
    except KeyError:
        raise ValueError(f"Unsupported quality: {quality}") from None
    return [
        ffmpeg,
        "-i",
        str(video_path),
        "-vf",
        f"scale=-2:{height}",
        "-c:v",
        "libx264",
        "-preset",
        "medium",
        "-crf",
        "23",
        "-c:a",
        "aac",
        "-movflags",
        "+faststart",
        "-y",
        str(output_path),
    ]


def build_frame_args(
    video_path: Path,
    output_path: Path,
    seek_seconds: float = 1.0,
    width: int = 640,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    """Grab a single frame at ``seek_seconds``, scaled to ``width``."""
    return [
        ffmpeg,
        "-ss",
        f"{seek_seconds:g}",
        "-i",
        str(video_path),
        "-vframes",
        "1",
        "-vf",
        f"scale={width}:-1",
        "-q:v",
        "2",
        "-y",
        str(output_path),
    ]
