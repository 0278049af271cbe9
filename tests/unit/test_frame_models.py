"""Unit tests for frame and job domain models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.domain.exceptions import ValidationError
from src.domain.models import (
    ExtractFramesPayload,
    Frame,
    FrameDescriptor,
    FrameOutcome,
    Job,
    JobStatus,
    Recording,
    SceneType,
    VisualIndexingStatus,
)


class TestFrame:
    """Tests for Frame model."""

    def test_row_id(self):
        assert Frame.row_id("rec-1", 12) == "rec-1:12"

    def test_optional_stage_fields_default_to_none(self):
        frame = Frame(
            id=Frame.row_id("rec-1", 1),
            recording_id="rec-1",
            org_id="org-1",
            frame_number=1,
            frame_time_sec=0.0,
            frame_url="org-1/rec-1/frames/frame_0001.jpg",
        )

        assert frame.visual_description is None
        assert frame.scene_type is None
        assert frame.visual_embedding is None
        assert frame.ocr_text is None
        assert frame.visual_indexing_error is None
        assert frame.detected_elements == []

    def test_frame_number_is_one_based(self):
        with pytest.raises(PydanticValidationError):
            FrameDescriptor(frame_number=0, time_sec=0.0, storage_path="x")

    def test_descriptor_is_frozen(self):
        descriptor = FrameDescriptor(frame_number=1, time_sec=0.0, storage_path="x")
        with pytest.raises(PydanticValidationError):
            descriptor.frame_number = 2  # type: ignore[misc]

    def test_scene_type_values(self):
        assert SceneType("terminal") is SceneType.TERMINAL
        assert SceneType.OTHER.value == "other"


class TestFrameOutcome:
    """Tests for FrameOutcome."""

    def test_ok(self):
        assert FrameOutcome(frame_number=1, value="text").ok is True

    def test_error(self):
        outcome = FrameOutcome(frame_number=2, error="ocr failed for frame 2: x")
        assert outcome.ok is False
        assert outcome.value is None


class TestJob:
    """Tests for Job model."""

    def test_defaults(self):
        job = Job(id="job-1", type="extract_frames")
        assert job.status == JobStatus.PENDING
        assert job.attempt_count == 0
        assert job.max_attempts == 3
        assert job.is_terminal is False

    @pytest.mark.parametrize(
        ("status", "terminal"),
        [
            (JobStatus.PENDING, False),
            (JobStatus.PROCESSING, False),
            (JobStatus.COMPLETED, True),
            (JobStatus.FAILED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert Job(id="j", type="t", status=status).is_terminal is terminal

    def test_attempts_cannot_exceed_max(self):
        with pytest.raises(PydanticValidationError, match="exceeds max_attempts"):
            Job(id="j", type="t", attempt_count=4, max_attempts=3)


class TestExtractFramesPayload:
    """Tests for ExtractFramesPayload parsing."""

    def test_snake_case_payload(self):
        payload = ExtractFramesPayload.from_payload(
            {"recording_id": "rec-1", "org_id": "org-1", "video_url": "a/b.webm"}
        )
        assert payload.recording_id == "rec-1"
        assert payload.video_url == "a/b.webm"
        assert payload.video_path is None

    def test_camel_case_payload(self):
        payload = ExtractFramesPayload.from_payload(
            {
                "recordingId": "rec-1",
                "orgId": "org-1",
                "videoUrl": "org-1/rec-1/recording.webm",
            }
        )
        assert payload.recording_id == "rec-1"
        assert payload.org_id == "org-1"
        assert payload.object_key == "org-1/rec-1/recording.webm"

    def test_camel_case_video_path(self):
        payload = ExtractFramesPayload.from_payload(
            {"recordingId": "r", "orgId": "o", "videoPath": "/data/rec.webm"}
        )
        assert payload.local_video_path == "/data/rec.webm"

    @pytest.mark.parametrize(
        ("raw", "field"),
        [
            ({"org_id": "org-1", "video_url": "v"}, "recording_id"),
            ({"orgId": "org-1", "videoUrl": "v"}, "recording_id"),
            ({"recording_id": " ", "org_id": "o", "video_url": "v"}, "recording_id"),
            ({"recording_id": "r", "org_id": 7, "video_url": "v"}, "org_id"),
            ({"recordingId": "r", "orgId": 7, "videoUrl": "v"}, "org_id"),
            ({"recording_id": "r", "org_id": "o", "video_url": 3}, "video_url"),
            ({"recording_id": "r", "org_id": "o", "video_path": 3}, "video_path"),
            ({"recording_id": "r", "org_id": "o"}, "video_url"),
            (
                {"recording_id": "r", "org_id": "o", "video_url": "https://x/v.mp4"},
                "video_url",
            ),
        ],
    )
    def test_invalid_payload(self, raw, field):
        with pytest.raises(ValidationError) as exc_info:
            ExtractFramesPayload.from_payload(raw)
        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        ("video_url", "video_path", "object_key", "local_path"),
        [
            ("org-1/rec-1/recording.webm", None, "org-1/rec-1/recording.webm", None),
            ("file:///data/rec.mp4", None, None, "/data/rec.mp4"),
            (None, "/data/rec.mp4", None, "/data/rec.mp4"),
            ("org-1/rec-1/recording.webm", "/data/rec.mp4", None, "/data/rec.mp4"),
        ],
    )
    def test_video_source(self, video_url, video_path, object_key, local_path):
        payload = ExtractFramesPayload(
            recording_id="r", org_id="o", video_url=video_url, video_path=video_path
        )
        assert payload.object_key == object_key
        assert payload.local_video_path == local_path


class TestRecording:
    """Tests for Recording model."""

    def test_defaults(self):
        recording = Recording(id="rec-1", org_id="org-1")
        assert recording.visual_indexing_status == VisualIndexingStatus.PENDING
        assert recording.frames_extracted is False
        assert recording.frame_count == 0
