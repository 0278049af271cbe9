"""Unit tests for domain exceptions."""

import pytest

from src.domain.exceptions import (
    DomainException,
    EmbeddingGenerationError,
    FrameExtractionError,
    FrameIngestionError,
    PerFrameStageError,
    SearchBackendError,
    UnknownJobTypeError,
    ValidationError,
)


class TestDomainException:
    """Tests for base DomainException."""

    def test_is_exception(self):
        exc = DomainException("Test error")
        assert isinstance(exc, Exception)
        assert str(exc) == "Test error"
        assert exc.details == {}

    @pytest.mark.parametrize(
        "exc",
        [
            ValidationError("query", "must not be empty"),
            EmbeddingGenerationError(1536, "timeout"),
            FrameExtractionError("rec-1", "no frames"),
            PerFrameStageError("ocr", 3, "unreadable"),
            SearchBackendError("Hierarchical search failed", "down"),
            FrameIngestionError("job-1", "rec-1", "extracting", "x", retryable=True),
            UnknownJobTypeError("transcribe"),
        ],
    )
    def test_all_inherit_from_base(self, exc):
        assert isinstance(exc, DomainException)


class TestValidationError:
    """Tests for ValidationError."""

    def test_message_and_details(self):
        exc = ValidationError("threshold", "must be within [0, 1]")
        assert str(exc) == "Invalid threshold: must be within [0, 1]"
        assert exc.field == "threshold"
        assert exc.details == {"field": "threshold", "reason": "must be within [0, 1]"}


class TestEmbeddingGenerationError:
    """Tests for EmbeddingGenerationError."""

    def test_single_resolution(self):
        exc = EmbeddingGenerationError(3072, "expected 3072 values, got 12")
        assert str(exc) == (
            "Failed to generate 3072-dim embedding: expected 3072 values, got 12"
        )
        assert exc.details["resolution"] == 3072

    def test_dual(self):
        exc = EmbeddingGenerationError(None, "rate limited")
        assert str(exc) == "Failed to generate dual embeddings: rate limited"


class TestFrameExtractionError:
    """Tests for FrameExtractionError."""

    def test_with_cause(self):
        cause = FileNotFoundError("video.mp4")
        exc = FrameExtractionError("rec-1", "source missing", cause=cause)

        assert str(exc) == "Frame extraction failed for rec-1: source missing"
        assert exc.cause is cause
        assert exc.details["cause"] == "FileNotFoundError"

    def test_without_cause(self):
        assert FrameExtractionError("rec-1", "x").details["cause"] is None


class TestPerFrameStageError:
    """Tests for PerFrameStageError."""

    def test_message(self):
        exc = PerFrameStageError("visual_indexing", 7, "bad json")
        assert str(exc) == "visual_indexing failed for frame 7: bad json"
        assert exc.details["frame_number"] == 7


class TestSearchBackendError:
    """Tests for SearchBackendError."""

    def test_prefix_kept(self):
        exc = SearchBackendError("Multimodal search failed", "connection refused")
        assert str(exc) == "Multimodal search failed: connection refused"
        assert exc.details == {
            "operation": "Multimodal search failed",
            "reason": "connection refused",
        }


class TestFrameIngestionError:
    """Tests for FrameIngestionError."""

    def test_message_and_retryable(self):
        exc = FrameIngestionError(
            "job-1", "rec-1", "extracting", "ffmpeg crashed", retryable=False
        )

        assert str(exc) == (
            "Frame ingestion failed for job job-1 (recording rec-1) "
            "at extracting: ffmpeg crashed"
        )
        assert exc.retryable is False
        assert exc.details["stage"] == "extracting"

    def test_retryable_is_keyword_only(self):
        with pytest.raises(TypeError):
            FrameIngestionError(
                "job-1", "rec-1", "extracting", "x", True  # type: ignore[misc]
            )


class TestUnknownJobTypeError:
    """Tests for UnknownJobTypeError."""

    def test_message(self):
        exc = UnknownJobTypeError("transcribe")
        assert str(exc) == "No handler registered for job type: transcribe"
        assert exc.details == {"job_type": "transcribe"}
