"""Frame sampling configuration value object."""

import math

from pydantic import BaseModel, ConfigDict, Field


class FrameSamplingConfig(BaseModel):
    """Fixed-interval frame sampling parameters.

    Sampling is deterministic: frame ``n`` (1-based) is taken at
    ``(n - 1) * interval_seconds`` and at most ``max_frames`` are kept.
    """

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = Field(
        default=2.0,
        gt=0,
        le=600,
        description="Seconds between consecutive sampled frames",
    )
    max_frames: int = Field(
        default=300,
        ge=1,
        description="Upper bound on frames per recording",
    )
    quality: int = Field(
        default=85,
        ge=1,
        le=100,
        description="JPEG quality of stored frames",
    )
    width: int | None = Field(
        default=None,
        ge=16,
        description="Scale frames to this width, keeping aspect ratio",
    )

    @property
    def fps(self) -> float:
        """Sampling rate in frames per second."""
        return 1.0 / self.interval_seconds

    def timestamp_for(self, frame_number: int) -> float:
        """Offset in seconds of a 1-based frame number."""
        return round((frame_number - 1) * self.interval_seconds, 3)

    def expected_frame_count(self, duration_seconds: float) -> int:
        """Number of frames sampling yields for a video of this duration.

        Args:
            duration_seconds: Length of the source video.

        Returns:
            Frame count, capped at ``max_frames``.
        """
        if duration_seconds <= 0:
            return 0
        return min(self.max_frames, math.ceil(duration_seconds / self.interval_seconds))
