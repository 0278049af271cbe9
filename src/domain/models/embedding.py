"""Embedding domain models and vector math."""

import math
from enum import IntEnum

from pydantic import BaseModel, Field, model_validator


class EmbeddingResolution(IntEnum):
    """Supported embedding dimensionalities."""

    LOW = 1536  # document/summary level, coarse ranking
    HIGH = 3072  # chunk level, fine ranking


class DualEmbedding(BaseModel):
    """A pair of vectors generated from the same input text.

    The two vectors are never compared with each other; each one is only
    compared against vectors of its own resolution.
    """

    vector_low: list[float] = Field(description="1536-dimension vector")
    vector_high: list[float] = Field(description="3072-dimension vector")

    @model_validator(mode="after")
    def validate_dimensions(self) -> "DualEmbedding":
        """Ensure each vector has its resolution's length."""
        for name, vector, expected in (
            ("vector_low", self.vector_low, EmbeddingResolution.LOW),
            ("vector_high", self.vector_high, EmbeddingResolution.HIGH),
        ):
            if len(vector) != expected:
                msg = f"{name} length ({len(vector)}) must be {int(expected)}"
                raise ValueError(msg)
        return self


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        Cosine similarity between -1 and 1, or 0.0 for a zero vector.

    Raises:
        ValueError: If vectors have different dimensions.
    """
    if len(a) != len(b):
        msg = f"Vector dimensions must match: {len(a)} vs {len(b)}"
        raise ValueError(msg)

    dot_product = sum(x * y for x, y in zip(a, b, strict=True))
    magnitude_a = math.sqrt(sum(x * x for x in a))
    magnitude_b = math.sqrt(sum(y * y for y in b))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    return float(dot_product / (magnitude_a * magnitude_b))


def clamp_similarity(value: float) -> float:
    """Clamp a similarity score into ``[0, 1]``."""
    return max(0.0, min(1.0, value))
