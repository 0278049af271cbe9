"""FFmpeg implementation of frame extraction."""

import asyncio
import subprocess
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from src.domain.value_objects import FrameSamplingConfig
from src.infrastructure.video.base import (
    ExtractedFrame,
    FrameExtractorBase,
    VideoDecodeError,
)


class FFmpegFrameExtractor(FrameExtractorBase):
    """FFmpeg-based frame extraction from video files.

    Requires ffmpeg to be installed and available in PATH.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        """Initialize FFmpeg frame extractor.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
        """
        self._ffmpeg = ffmpeg_path

    def build_command(
        self,
        video_path: Path,
        output_dir: Path,
        config: FrameSamplingConfig,
    ) -> list[str]:
        """Build the ffmpeg command line for a sampling run."""
        video_filter = f"fps={config.fps}"
        if config.width:
            video_filter += f",scale={config.width}:-2"

        return [
            self._ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(video_path),
            "-vf",
            video_filter,
            "-frames:v",
            str(config.max_frames),
            # JPEG quality 1-100 mapped onto ffmpeg's 2 (best) to 31 (worst)
            "-q:v",
            str(max(2, round(31 - (config.quality / 100) * 29))),
            "-y",
            str(output_dir / "frame_%04d.jpg"),
        ]

    async def extract_frames(
        self,
        video_path: Path,
        output_dir: Path,
        config: FrameSamplingConfig,
    ) -> list[ExtractedFrame]:
        """Sample frames at a fixed interval."""
        if not video_path.exists():
            raise VideoDecodeError(video_path, "source file does not exist")

        output_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(video_path, output_dir, config)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: subprocess.run(cmd, capture_output=True, check=True),
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode(errors="replace").strip()
            reason = stderr or f"exit code {e.returncode}"
            raise VideoDecodeError(video_path, reason) from e
        except FileNotFoundError as e:
            reason = f"ffmpeg not found: {self._ffmpeg}"
            raise VideoDecodeError(video_path, reason) from e

        frame_files = sorted(output_dir.glob("frame_*.jpg"))
        if not frame_files:
            raise VideoDecodeError(video_path, "no frames decoded")

        frames: list[ExtractedFrame] = []
        for frame_number, frame_path in enumerate(frame_files, start=1):
            try:
                with Image.open(frame_path) as img:
                    width, height = img.size
            except (UnidentifiedImageError, OSError) as e:
                raise VideoDecodeError(
                    video_path, f"unreadable frame {frame_path.name}"
                ) from e

            frames.append(
                ExtractedFrame(
                    path=frame_path,
                    frame_number=frame_number,
                    timestamp=config.timestamp_for(frame_number),
                    width=width,
                    height=height,
                    size_bytes=frame_path.stat().st_size,
                )
            )

        return frames
