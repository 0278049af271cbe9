"""DTOs for frame ingestion operations."""

from enum import Enum

from pydantic import BaseModel, Field

from src.domain.models import ExtractFramesPayload


class IngestionStage(str, Enum):
    """Stages of the extract-frames job, logged as ``stage``."""

    RECEIVED = "received"
    EXTRACTING = "extracting"
    ANALYZING = "ocr_and_visual_indexing"
    PERSISTING = "persisting"
    DONE = "done"


class VideoSource(BaseModel):
    """Where the source video of a recording lives."""

    org_id: str = Field(description="Owning organization")
    recording_id: str = Field(description="Recording the frames belong to")
    object_key: str | None = Field(
        default=None,
        description="Object key in the recordings bucket",
    )
    local_path: str | None = Field(
        default=None,
        description="Filesystem path of an already available video",
    )

    @classmethod
    def from_payload(cls, payload: ExtractFramesPayload) -> "VideoSource":
        """Build a source from a validated job payload."""
        return cls(
            org_id=payload.org_id,
            recording_id=payload.recording_id,
            object_key=payload.object_key,
            local_path=payload.local_video_path,
        )


class VisualIndexingReport(BaseModel):
    """Counts produced by one visual indexing run."""

    recording_id: str
    total: int = Field(default=0, ge=0, description="Frames without description")
    indexed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    failed_frames: list[int] = Field(default_factory=list)


class FrameIngestionResult(BaseModel):
    """Summary of a completed extract-frames job."""

    job_id: str
    recording_id: str
    frame_count: int = Field(ge=0)
    ocr_enabled: bool
    ocr_succeeded: int = 0
    ocr_failed: int = 0
    visual_indexing_enabled: bool
    visual_report: VisualIndexingReport | None = None
    processing_time_ms: float = 0.0
