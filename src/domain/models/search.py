"""Search result domain models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Modality(str, Enum):
    """Origin of a fused search result."""

    AUDIO = "audio"
    VISUAL = "visual"


class ChunkResult(BaseModel):
    """A chunk returned by hierarchical search."""

    id: str = Field(description="Chunk identifier")
    recording_id: str
    recording_title: str = ""
    chunk_text: str
    similarity: float = Field(description="Chunk-level (3072-dim) similarity")
    summary_similarity: float = Field(
        description="Document-level (1536-dim) similarity of the parent",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class TranscriptSearchResult(BaseModel):
    """A transcript chunk matched by the audio modality."""

    chunk_id: str
    recording_id: str
    recording_title: str = ""
    text: str
    similarity: float = Field(ge=0, le=1)
    timestamp: float | None = Field(
        default=None,
        description="Start offset of the chunk in seconds",
    )


class VisualSearchResult(BaseModel):
    """A video frame matched by the visual modality."""

    frame_id: str
    recording_id: str
    timestamp_sec: float
    description: str = ""
    ocr_text: str | None = None
    similarity: float = Field(ge=0, le=1)
    frame_url: str | None = None
    scene_type: str | None = None


class CombinedResult(BaseModel):
    """A transcript or visual result with its fused score."""

    modality: Modality
    score: float
    similarity: float
    recording_id: str
    transcript: TranscriptSearchResult | None = None
    visual: VisualSearchResult | None = None


class MultimodalSearchMetadata(BaseModel):
    """Counts and parameters reported with a multimodal search."""

    transcript_count: int
    visual_count: int
    total_count: int
    audio_weight: float
    visual_weight: float
    threshold: float
    processing_time_ms: float


class MultimodalSearchResponse(BaseModel):
    """Full result of a multimodal search."""

    transcript_results: list[TranscriptSearchResult] = Field(default_factory=list)
    visual_results: list[VisualSearchResult] = Field(default_factory=list)
    combined_results: list[CombinedResult] = Field(default_factory=list)
    metadata: MultimodalSearchMetadata
