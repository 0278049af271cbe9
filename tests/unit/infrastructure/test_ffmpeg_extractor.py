"""Unit tests for the FFmpeg frame extractor."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from src.domain.value_objects import FrameSamplingConfig
from src.infrastructure.video import FFmpegFrameExtractor
from src.infrastructure.video.base import VideoDecodeError

RUN = "src.infrastructure.video.ffmpeg_extractor.subprocess.run"


@pytest.fixture
def video(tmp_path) -> Path:
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


def _write_frames(output_dir: Path, count: int) -> None:
    for n in range(1, count + 1):
        Image.new("RGB", (64, 36), color=(n, n, n)).save(
            output_dir / f"frame_{n:04d}.jpg", format="JPEG"
        )


class TestBuildCommand:
    """Tests for ffmpeg command construction."""

    def test_default_sampling(self, tmp_path):
        cmd = FFmpegFrameExtractor().build_command(
            Path("in.mp4"), tmp_path, FrameSamplingConfig()
        )

        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-vf") + 1] == "fps=0.5"
        assert cmd[cmd.index("-frames:v") + 1] == "300"
        assert cmd[cmd.index("-q:v") + 1] == "6"
        assert cmd[-1] == str(tmp_path / "frame_%04d.jpg")

    def test_width_and_quality(self, tmp_path):
        config = FrameSamplingConfig(interval_seconds=1.0, quality=100, width=640)

        cmd = FFmpegFrameExtractor("/opt/ffmpeg").build_command(
            Path("in.mp4"), tmp_path, config
        )

        assert cmd[0] == "/opt/ffmpeg"
        assert cmd[cmd.index("-vf") + 1] == "fps=1.0,scale=640:-2"
        assert cmd[cmd.index("-q:v") + 1] == "2"


class TestExtractFrames:
    """Tests for extraction failure modes and output."""

    async def test_missing_source(self, tmp_path):
        with pytest.raises(VideoDecodeError, match="does not exist"):
            await FFmpegFrameExtractor().extract_frames(
                tmp_path / "missing.mp4", tmp_path / "out", FrameSamplingConfig()
            )

    async def test_frames_numbered_and_timestamped(self, video, tmp_path):
        output_dir = tmp_path / "frames"

        def fake_run(cmd, capture_output, check):
            _write_frames(output_dir, 3)
            return subprocess.CompletedProcess(cmd, 0)

        with patch(RUN, side_effect=fake_run):
            frames = await FFmpegFrameExtractor().extract_frames(
                video, output_dir, FrameSamplingConfig()
            )

        assert [f.frame_number for f in frames] == [1, 2, 3]
        assert [f.timestamp for f in frames] == [0.0, 2.0, 4.0]
        assert (frames[0].width, frames[0].height) == (64, 36)
        assert frames[0].size_bytes > 0

    async def test_ffmpeg_failure(self, video, tmp_path):
        error = subprocess.CalledProcessError(
            1, ["ffmpeg"], stderr=b"Invalid data found when processing input"
        )

        with (
            patch(RUN, side_effect=error),
            pytest.raises(VideoDecodeError, match="Invalid data found"),
        ):
            await FFmpegFrameExtractor().extract_frames(
                video, tmp_path / "out", FrameSamplingConfig()
            )

    async def test_ffmpeg_failure_without_stderr(self, video, tmp_path):
        error = subprocess.CalledProcessError(69, ["ffmpeg"], stderr=b"")

        with (
            patch(RUN, side_effect=error),
            pytest.raises(VideoDecodeError, match="exit code 69"),
        ):
            await FFmpegFrameExtractor().extract_frames(
                video, tmp_path / "out", FrameSamplingConfig()
            )

    async def test_ffmpeg_missing(self, video, tmp_path):
        with (
            patch(RUN, side_effect=FileNotFoundError()),
            pytest.raises(VideoDecodeError, match="ffmpeg not found"),
        ):
            await FFmpegFrameExtractor().extract_frames(
                video, tmp_path / "out", FrameSamplingConfig()
            )

    async def test_no_frames_decoded(self, video, tmp_path):
        with (
            patch(RUN, return_value=subprocess.CompletedProcess([], 0)),
            pytest.raises(VideoDecodeError, match="no frames decoded"),
        ):
            await FFmpegFrameExtractor().extract_frames(
                video, tmp_path / "out", FrameSamplingConfig()
            )

    async def test_unreadable_frame(self, video, tmp_path):
        output_dir = tmp_path / "frames"

        def fake_run(cmd, capture_output, check):
            (output_dir / "frame_0001.jpg").write_bytes(b"truncated")
            return subprocess.CompletedProcess(cmd, 0)

        with (
            patch(RUN, side_effect=fake_run),
            pytest.raises(VideoDecodeError, match="unreadable frame"),
        ):
            await FFmpegFrameExtractor().extract_frames(
                video, output_dir, FrameSamplingConfig()
            )
