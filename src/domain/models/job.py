"""Job queue domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Self
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from src.domain.exceptions import ValidationError


class JobStatus(str, Enum):
    """Lifecycle status of a queued job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"  # terminal


class JobType(str, Enum):
    """Job types the core knows how to handle."""

    EXTRACT_FRAMES = "extract_frames"


class Job(BaseModel):
    """A unit of work delivered by the external queue.

    The queue owns the record; handlers only read ``payload`` and report an
    outcome through the dispatcher.
    """

    id: str
    type: str
    status: JobStatus = JobStatus.PENDING
    payload: dict[str, Any] = Field(default_factory=dict)
    org_id: str | None = None
    attempt_count: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=3, ge=1)
    run_after: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    dedupe_key: str | None = None
    last_error: str | None = None

    @model_validator(mode="after")
    def validate_attempts(self) -> Self:
        """Ensure attempt_count never exceeds max_attempts."""
        if self.attempt_count > self.max_attempts:
            msg = (
                f"attempt_count ({self.attempt_count}) "
                f"exceeds max_attempts ({self.max_attempts})"
            )
            raise ValueError(msg)
        return self

    @property
    def is_terminal(self) -> bool:
        """Whether the job reached a final state."""
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)


class ExtractFramesPayload(BaseModel):
    """Payload of an ``extract_frames`` job.

    Queue producers may send either snake_case or camelCase keys
    (``recordingId``, ``orgId``, ``videoUrl``, ``videoPath``).
    """

    model_config = ConfigDict(populate_by_name=True)

    recording_id: str = Field(alias="recordingId")
    org_id: str = Field(alias="orgId")
    video_url: str | None = Field(
        default=None,
        alias="videoUrl",
        description="Object key in the recordings bucket, or a file:// URL",
    )
    video_path: str | None = Field(
        default=None,
        alias="videoPath",
        description="Filesystem path of an already available video",
    )

    @field_validator("recording_id", "org_id")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        """Reject blank ids."""
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Self:
        """Validate a raw job payload.

        Args:
            payload: The job's payload mapping.

        Returns:
            Parsed payload.

        Raises:
            ValidationError: If an id is missing or blank, a field has the
                wrong type, or no usable video source is given.
        """
        try:
            parsed = cls.model_validate(payload)
        except PydanticValidationError as e:
            error = e.errors()[0]
            raise ValidationError(cls._field_name(error["loc"]), error["msg"]) from e

        if not parsed.video_path and not parsed.video_url:
            raise ValidationError(
                "video_url", "either video_url or video_path is required"
            )
        if parsed.video_url and not parsed.video_path:
            scheme = urlparse(parsed.video_url).scheme
            if scheme not in ("", "file"):
                raise ValidationError(
                    "video_url", "must be a storage key or a file:// URL"
                )
        return parsed

    @classmethod
    def _field_name(cls, loc: tuple[int | str, ...]) -> str:
        key = str(loc[0]) if loc else "payload"
        for name, field in cls.model_fields.items():
            if key in (name, field.alias):
                return name
        return key

    @property
    def local_video_path(self) -> str | None:
        """Filesystem path of the source video, if it is already local."""
        if self.video_path:
            return self.video_path
        if self.video_url and urlparse(self.video_url).scheme == "file":
            return urlparse(self.video_url).path
        return None

    @property
    def object_key(self) -> str | None:
        """Recordings bucket key to download, when the video is not local."""
        if self.video_path or not self.video_url:
            return None
        if urlparse(self.video_url).scheme:
            return None
        return self.video_url
