"""Domain value objects."""

from src.domain.value_objects.sampling_config import FrameSamplingConfig

__all__ = [
    "FrameSamplingConfig",
]
