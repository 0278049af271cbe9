"""Job handler for extract-frames jobs."""

import asyncio
import time
from datetime import UTC, datetime
from typing import Any

from src.application.dtos import (
    FrameIngestionResult,
    IngestionStage,
    VideoSource,
    VisualIndexingReport,
)
from src.application.services.frame_extraction import FrameExtractionStage
from src.application.services.ocr import OCRStage
from src.application.services.retry import RetryPolicy
from src.application.services.visual_indexing import VisualIndexingStage
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings import FeatureFlags
from src.commons.settings.models import Settings
from src.commons.telemetry import LogContext, get_logger
from src.domain.exceptions import FrameIngestionError, ValidationError
from src.domain.models import (
    ExtractFramesPayload,
    Frame,
    FrameDescriptor,
    FrameOutcome,
    Job,
    OCRResult,
    VisualIndexingStatus,
)


class FrameIngestionJobHandler:
    """Drives one extract-frames job from payload to persisted frame rows.

    Stages: received, extracting, then OCR and visual indexing in parallel,
    then persisting. Any whole-stage error goes to failure handling, which
    marks the recording failed once attempts are exhausted and re-raises as
    ``FrameIngestionError``. Per-frame OCR or indexing errors never fail the
    job.

    Frame rows are keyed by ``(recording_id, frame_number)``, so handling the
    same job twice produces the same rows.
    """

    def __init__(
        self,
        extraction_stage: FrameExtractionStage,
        ocr_stage: OCRStage,
        visual_indexing_stage: VisualIndexingStage,
        document_db: DocumentDBBase,
        retry_policy: RetryPolicy,
        settings: Settings,
        feature_flags: FeatureFlags | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            extraction_stage: Produces stored frames from the source video.
            ocr_stage: Recognizes on-screen text.
            visual_indexing_stage: Describes and embeds frames.
            document_db: Store for recording and frame rows.
            retry_policy: Decides whether a failed job is retried.
            settings: Application settings (collections, batch sizes).
            feature_flags: Source of per-invocation flags.
        """
        self._extraction = extraction_stage
        self._ocr = ocr_stage
        self._visual_indexing = visual_indexing_stage
        self._document_db = document_db
        self._retry_policy = retry_policy
        self._settings = settings
        self._flags = feature_flags or FeatureFlags()
        self._recordings = settings.document_db.collections.recordings
        self._frames = settings.document_db.collections.video_frames
        self._logger = get_logger(__name__)

    async def handle_extract_frames(self, job: Job) -> FrameIngestionResult:
        """Process one extract-frames job.

        Args:
            job: Job record delivered by the queue.

        Returns:
            Summary of the completed run.

        Raises:
            FrameIngestionError: If any stage fails as a whole. ``retryable``
                tells whether the queue should schedule another attempt.
        """
        start_time = time.perf_counter()
        stage = IngestionStage.RECEIVED
        payload: ExtractFramesPayload | None = None

        with LogContext(correlation_id=job.id, job_id=job.id):
            try:
                payload = ExtractFramesPayload.from_payload(job.payload)
                flags = self._flags.snapshot()
                self._log_stage(stage, job, payload.recording_id)

                await self._set_recording_status(
                    payload,
                    VisualIndexingStatus.PROCESSING,
                )

                stage = IngestionStage.EXTRACTING
                self._log_stage(stage, job, payload.recording_id)
                descriptors = await self._extraction.extract_frames(
                    VideoSource.from_payload(payload)
                )

                await self._upsert_base_rows(payload, descriptors)

                stage = IngestionStage.ANALYZING
                self._log_stage(stage, job, payload.recording_id)
                ocr_outcomes, report = await asyncio.gather(
                    self._run_ocr(descriptors, flags.ocr_enabled),
                    self._run_visual_indexing(
                        payload,
                        flags.visual_indexing_enabled,
                    ),
                )

                stage = IngestionStage.PERSISTING
                self._log_stage(stage, job, payload.recording_id)
                await self._persist_ocr(payload.recording_id, ocr_outcomes)
                await self._complete_recording(payload, len(descriptors))

            except Exception as e:
                raise await self._handle_failure(job, payload, stage, e) from e

            ocr_failed = sum(1 for outcome in ocr_outcomes if not outcome.ok)
            result = FrameIngestionResult(
                job_id=job.id,
                recording_id=payload.recording_id,
                frame_count=len(descriptors),
                ocr_enabled=flags.ocr_enabled,
                ocr_succeeded=len(ocr_outcomes) - ocr_failed,
                ocr_failed=ocr_failed,
                visual_indexing_enabled=flags.visual_indexing_enabled,
                visual_report=report,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
            )

            self._logger.info(
                "Frame ingestion completed",
                extra={
                    "stage": IngestionStage.DONE.value,
                    "recording_id": payload.recording_id,
                    "frame_count": result.frame_count,
                    "ocr_failed": result.ocr_failed,
                    "visual_failed": report.failed if report else 0,
                    "duration_ms": round(result.processing_time_ms, 2),
                },
            )
            return result

    async def _run_ocr(
        self,
        descriptors: list[FrameDescriptor],
        enabled: bool,
    ) -> list[FrameOutcome[OCRResult]]:
        if not enabled:
            return []
        return await self._ocr.extract_frames_text(
            descriptors,
            self._settings.ocr.batch_size,
        )

    async def _run_visual_indexing(
        self,
        payload: ExtractFramesPayload,
        enabled: bool,
    ) -> VisualIndexingReport | None:
        if not enabled:
            return None
        return await self._visual_indexing.index_recording_frames(
            payload.recording_id,
            payload.org_id,
        )

    async def _upsert_base_rows(
        self,
        payload: ExtractFramesPayload,
        descriptors: list[FrameDescriptor],
    ) -> None:
        for descriptor in descriptors:
            await self._document_db.upsert(
                self._frames,
                Frame.row_id(payload.recording_id, descriptor.frame_number),
                {
                    "recording_id": payload.recording_id,
                    "org_id": payload.org_id,
                    "frame_number": descriptor.frame_number,
                    "frame_time_sec": descriptor.time_sec,
                    "frame_url": descriptor.storage_path,
                    "metadata": descriptor.metadata.model_dump(),
                },
            )

    async def _persist_ocr(
        self,
        recording_id: str,
        outcomes: list[FrameOutcome[OCRResult]],
    ) -> None:
        for outcome in outcomes:
            fields: dict[str, Any]
            if outcome.ok and outcome.value is not None:
                fields = {
                    "ocr_text": outcome.value.text,
                    "ocr_confidence": outcome.value.confidence,
                    "ocr_blocks": [b.model_dump() for b in outcome.value.blocks],
                }
            else:
                fields = {
                    "ocr_text": None,
                    "ocr_confidence": None,
                    "ocr_blocks": [],
                }
            await self._document_db.upsert(
                self._frames,
                Frame.row_id(recording_id, outcome.frame_number),
                fields,
            )

    async def _set_recording_status(
        self,
        payload: ExtractFramesPayload,
        status: VisualIndexingStatus,
    ) -> None:
        await self._document_db.upsert(
            self._recordings,
            payload.recording_id,
            {
                "org_id": payload.org_id,
                "visual_indexing_status": status.value,
                "visual_indexing_error": None,
                "updated_at": datetime.now(UTC),
            },
        )

    async def _complete_recording(
        self,
        payload: ExtractFramesPayload,
        frame_count: int,
    ) -> None:
        await self._document_db.upsert(
            self._recordings,
            payload.recording_id,
            {
                "org_id": payload.org_id,
                "visual_indexing_status": VisualIndexingStatus.COMPLETED.value,
                "frames_extracted": True,
                "frame_count": frame_count,
                "visual_indexing_error": None,
                "updated_at": datetime.now(UTC),
            },
        )

    async def _handle_failure(
        self,
        job: Job,
        payload: ExtractFramesPayload | None,
        stage: IngestionStage,
        error: Exception,
    ) -> FrameIngestionError:
        """Mark the recording failed when attempts are exhausted.

        Returns:
            The error to raise in place of ``error``.
        """
        attempt = job.attempt_count + 1
        retryable = not isinstance(
            error, ValidationError
        ) and self._retry_policy.should_retry(attempt, job.max_attempts)
        recording_id = payload.recording_id if payload else None

        self._logger.error(
            "Frame ingestion failed",
            extra={
                "stage": stage.value,
                "recording_id": recording_id,
                "attempt": attempt,
                "max_attempts": job.max_attempts,
                "retryable": retryable,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )

        if not retryable and payload is not None:
            await self._mark_failed(payload, str(error))

        return FrameIngestionError(
            job.id,
            recording_id,
            stage.value,
            str(error),
            retryable=retryable,
        )

    async def _mark_failed(self, payload: ExtractFramesPayload, error: str) -> None:
        """Mark recording as failed without masking the original error."""
        try:
            await self._document_db.upsert(
                self._recordings,
                payload.recording_id,
                {
                    "org_id": payload.org_id,
                    "visual_indexing_status": VisualIndexingStatus.FAILED.value,
                    "visual_indexing_error": error,
                    "updated_at": datetime.now(UTC),
                },
            )
        except Exception as e:
            self._logger.warning(
                "Failed to mark recording as failed",
                extra={"recording_id": payload.recording_id, "error": str(e)},
            )

    def _log_stage(self, stage: IngestionStage, job: Job, recording_id: str) -> None:
        self._logger.info(
            "Frame ingestion stage",
            extra={
                "stage": stage.value,
                "job_id": job.id,
                "recording_id": recording_id,
                "attempt": job.attempt_count + 1,
            },
        )
