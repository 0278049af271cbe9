"""Recording domain models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class VisualIndexingStatus(str, Enum):
    """Progress of frame ingestion for a recording."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Recording(BaseModel):
    """A recorded audio/video item owned by an organization.

    Only the frame ingestion job handler mutates ``visual_indexing_status``.
    """

    id: str = Field(description="Recording identifier")
    org_id: str = Field(description="Owning organization")
    title: str = Field(default="", description="Display title")
    visual_indexing_status: VisualIndexingStatus = Field(
        default=VisualIndexingStatus.PENDING,
    )
    frames_extracted: bool = False
    frame_count: int = Field(default=0, ge=0)
    visual_indexing_error: str | None = Field(
        default=None,
        description="Error details if status is FAILED",
    )
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RecordingSummary(BaseModel):
    """Document-level summary used for coarse hierarchical ranking."""

    id: str
    recording_id: str
    org_id: str
    summary_text: str = ""
    created_at: datetime | None = None
