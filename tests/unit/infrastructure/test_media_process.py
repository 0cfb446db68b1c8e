"""Unit tests for command execution and ffmpeg argument builders."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from media_pipeline.commons.errors import CommandFailedError
from media_pipeline.infrastructure.media.process import (
    build_extract_audio_args,
    build_frame_args,
    build_split_audio_args,
    build_transcode_args,
    run_command,
)


class TestArgumentBuilders:
    """Tests for ffmpeg argument assembly."""

    def test_extract_audio(self):
        args = build_extract_audio_args(Path("in.mp4"), Path("out.mp3"))

        assert args[0] == "ffmpeg"
        assert "-vn" in args
        assert args[args.index("-ab") + 1] == "128k"
        assert args[args.index("-ar") + 1] == "44100"
        assert args[-1] == "out.mp3"

    def test_split_audio_segments(self, tmp_path: Path):
        args = build_split_audio_args(Path("a.mp3"), tmp_path, segment_seconds=300)

        assert args[args.index("-segment_time") + 1] == "300"
        assert args[-1] == str(tmp_path / "chunk-%03d.mp3")

    def test_transcode_scales_height(self):
        args = build_transcode_args(Path("in.mp4"), Path("480.mp4"), "480p")
        assert args[args.index("-vf") + 1] == "scale=-2:480"
        assert args[args.index("-c:v") + 1] == "libx264"

    def test_transcode_unknown_quality(self):
        with pytest.raises(ValueError, match="Unsupported quality"):
            build_transcode_args(Path("in.mp4"), Path("out.mp4"), "4k")

    def test_frame_args(self):
        args = build_frame_args(
            Path("in.mp4"),
            Path("thumb.jpg"),
            seek_seconds=1.5,
            width=320,
            ffmpeg="/usr/bin/ffmpeg",
        )

        assert args[0] == "/usr/bin/ffmpeg"
        assert args[args.index("-ss") + 1] == "1.5"
        assert args[args.index("-vf") + 1] == "scale=320:-1"


class TestRunCommand:
    """Tests for run_command."""

    async def test_success(self):
        completed = subprocess.CompletedProcess(["ffmpeg"], 0, b"out", b"")
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = await run_command(["ffmpeg", Path("x")])

        mock_run.assert_called_once_with(
            ["ffmpeg", "x"], capture_output=True, check=False
        )
        assert result.stdout == b"out"

    async def test_non_zero_exit(self):
        completed = subprocess.CompletedProcess(
            ["ffmpeg"], 1, b"", b"Invalid data found when processing input\n"
        )
        with (
            patch("subprocess.run", return_value=completed),
            pytest.raises(CommandFailedError) as exc_info,
        ):
            await run_command(["ffmpeg", "-i", "broken.mp4"])

        assert exc_info.value.returncode == 1
        excerpt = exc_info.value.stderr_excerpt
        assert excerpt == "Invalid data found when processing input"
        assert "ffmpeg exited with status 1" in str(exc_info.value)

    async def test_missing_binary(self):
        with (
            patch("subprocess.run", side_effect=FileNotFoundError("no ffmpeg")),
            pytest.raises(CommandFailedError) as exc_info,
        ):
            await run_command(["ffmpeg"])

        assert exc_info.value.returncode == 127


class TestCommandFailedError:
    """Tests for stderr excerpting."""

    def test_keeps_tail_of_long_stderr(self):
        error = CommandFailedError(["ffmpeg"], 1, "x" * 5000 + "tail")
        assert len(error.stderr_excerpt) == 2000
        assert error.stderr_excerpt.endswith("tail")

    def test_message_without_stderr(self):
        assert str(CommandFailedError([], 2)) == "<command> exited with status 2"
