"""Domain exceptions for the recording search core.

Every exception carries structured attributes (stage, ids, reason) and a
``details`` mapping so callers can render a meaningful message without
parsing text. Search errors keep a stable message prefix.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for domain errors."""

    @property
    def details(self) -> dict[str, Any]:
        """Structured fields describing the failure."""
        return {}


class ValidationError(DomainException):
    """Raised when a payload or query parameter is malformed."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}


class EmbeddingGenerationError(DomainException):
    """Raised when the provider fails or returns a vector of the wrong length."""

    def __init__(self, resolution: int | None, reason: str) -> None:
        self.resolution = resolution
        self.reason = reason
        if resolution is None:
            message = f"Failed to generate dual embeddings: {reason}"
        else:
            message = f"Failed to generate {resolution}-dim embedding: {reason}"
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        return {"resolution": self.resolution, "reason": self.reason}


class FrameExtractionError(DomainException):
    """Raised when a video source cannot be decoded into frames."""

    def __init__(
        self,
        recording_id: str,
        reason: str,
        cause: BaseException | None = None,
    ) -> None:
        self.recording_id = recording_id
        self.reason = reason
        self.cause = cause
        super().__init__(f"Frame extraction failed for {recording_id}: {reason}")

    @property
    def details(self) -> dict[str, Any]:
        return {
            "recording_id": self.recording_id,
            "reason": self.reason,
            "cause": type(self.cause).__name__ if self.cause else None,
        }


class PerFrameStageError(DomainException):
    """Raised when OCR or visual indexing fails for a single frame.

    Never fatal to the enclosing batch or job.
    """

    def __init__(self, stage: str, frame_number: int, reason: str) -> None:
        self.stage = stage
        self.frame_number = frame_number
        self.reason = reason
        super().__init__(f"{stage} failed for frame {frame_number}: {reason}")

    @property
    def details(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "frame_number": self.frame_number,
            "reason": self.reason,
        }


class SearchBackendError(DomainException):
    """Raised when a search entry point cannot produce a complete result.

    The message always starts with ``prefix`` (for example
    ``"Hierarchical search failed"``) followed by the underlying reason.
    """

    def __init__(self, prefix: str, reason: str) -> None:
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"{prefix}: {reason}")

    @property
    def details(self) -> dict[str, Any]:
        return {"operation": self.prefix, "reason": self.reason}


class FrameIngestionError(DomainException):
    """Raised by the job handler when an extract-frames job fails.

    ``retryable`` tells the queue runtime whether attempts remain.
    """

    def __init__(
        self,
        job_id: str,
        recording_id: str | None,
        stage: str,
        reason: str,
        *,
        retryable: bool,
    ) -> None:
        self.job_id = job_id
        self.recording_id = recording_id
        self.stage = stage
        self.reason = reason
        self.retryable = retryable
        super().__init__(
            f"Frame ingestion failed for job {job_id} "
            f"(recording {recording_id}) at {stage}: {reason}"
        )

    @property
    def details(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "recording_id": self.recording_id,
            "stage": self.stage,
            "reason": self.reason,
            "retryable": self.retryable,
        }


class UnknownJobTypeError(DomainException):
    """Raised when no handler is registered for a job type."""

    def __init__(self, job_type: str) -> None:
        self.job_type = job_type
        super().__init__(f"No handler registered for job type: {job_type}")

    @property
    def details(self) -> dict[str, Any]:
        return {"job_type": self.job_type}
