"""Abstract base classes for video frame extraction."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from src.domain.value_objects import FrameSamplingConfig


@dataclass
class ExtractedFrame:
    """A frame image written to local disk."""

    path: Path
    frame_number: int
    timestamp: float
    width: int
    height: int
    size_bytes: int


class VideoDecodeError(Exception):
    """Raised when a video cannot be decoded or transformed into frames."""

    def __init__(self, video_path: Path, reason: str) -> None:
        self.video_path = video_path
        self.reason = reason
        super().__init__(f"Cannot decode {video_path}: {reason}")


class FrameExtractorBase(ABC):
    """Abstract base class for video frame extraction."""

    @abstractmethod
    async def extract_frames(
        self,
        video_path: Path,
        output_dir: Path,
        config: FrameSamplingConfig,
    ) -> list[ExtractedFrame]:
        """Sample frames at a fixed interval.

        Args:
            video_path: Path to the source video.
            output_dir: Directory to write JPEG frames to.
            config: Sampling parameters.

        Returns:
            Frames ordered by frame number, numbered from 1 without gaps.

        Raises:
            VideoDecodeError: If decoding fails. No partial list is returned.
        """
