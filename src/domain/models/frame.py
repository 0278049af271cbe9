"""Frame domain models for visual ingestion."""

from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SceneType(str, Enum):
    """Coarse classification of what a frame shows."""

    UI = "ui"
    CODE = "code"
    TERMINAL = "terminal"
    BROWSER = "browser"
    EDITOR = "editor"
    OTHER = "other"


class FrameMetadata(BaseModel):
    """Image properties captured at extraction time."""

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    size_bytes: int = Field(default=0, ge=0)


class FrameDescriptor(BaseModel):
    """One extracted frame, already persisted to object storage."""

    model_config = ConfigDict(frozen=True)

    frame_number: int = Field(ge=1, description="1-based contiguous ordinal")
    time_sec: float = Field(ge=0, description="Offset into the source video")
    storage_path: str = Field(description="Object storage key of the image")
    metadata: FrameMetadata = Field(default_factory=FrameMetadata)


class OCRBlock(BaseModel):
    """A word or line recognized by OCR."""

    text: str
    confidence: float = Field(ge=0, le=100)
    bbox: tuple[int, int, int, int] = Field(description="left, top, width, height")


class OCRResult(BaseModel):
    """Text recognized on one frame."""

    text: str = ""
    confidence: float | None = Field(default=None, ge=0, le=100)
    blocks: list[OCRBlock] = Field(default_factory=list)


class FrameDescription(BaseModel):
    """Vision model output for one frame."""

    description: str
    scene_type: SceneType = SceneType.OTHER
    detected_elements: list[str] = Field(default_factory=list)
    confidence: float | None = None


class Frame(BaseModel):
    """Persisted frame row.

    Created once per extracted frame and keyed by
    ``(recording_id, frame_number)``. The optional fields are filled by
    later stages and stay None when a stage is disabled or fails.
    """

    id: str
    recording_id: str
    org_id: str
    frame_number: int = Field(ge=1)
    frame_time_sec: float = Field(ge=0)
    frame_url: str
    metadata: FrameMetadata = Field(default_factory=FrameMetadata)
    visual_description: str | None = None
    scene_type: SceneType | None = None
    detected_elements: list[str] = Field(default_factory=list)
    visual_embedding: list[float] | None = None
    ocr_text: str | None = None
    ocr_confidence: float | None = None
    ocr_blocks: list[OCRBlock] = Field(default_factory=list)
    processed_at: datetime | None = None
    visual_indexing_error: str | None = None

    @staticmethod
    def row_id(recording_id: str, frame_number: int) -> str:
        """Deterministic row id for the ``(recording_id, frame_number)`` key."""
        return f"{recording_id}:{frame_number}"


class FrameOutcome(BaseModel, Generic[T]):
    """Tagged per-frame result of a batched stage.

    Exactly one of ``value`` or ``error`` is set.
    """

    frame_number: int
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the stage succeeded for this frame."""
        return self.error is None
