"""Video processing implementations."""

from src.infrastructure.video.base import (
    ExtractedFrame,
    FrameExtractorBase,
    VideoDecodeError,
)
from src.infrastructure.video.ffmpeg_extractor import FFmpegFrameExtractor

__all__ = [
    "FrameExtractorBase",
    "ExtractedFrame",
    "VideoDecodeError",
    "FFmpegFrameExtractor",
]
