"""Frame extraction stage: video source to stored frame images."""

import asyncio
import logging
import tempfile
from pathlib import Path

from src.application.dtos import VideoSource
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import FrameExtractionError
from src.domain.models import FrameDescriptor, FrameMetadata
from src.domain.value_objects import FrameSamplingConfig
from src.infrastructure.video.base import ExtractedFrame, FrameExtractorBase


def frame_storage_path(org_id: str, recording_id: str, frame_number: int) -> str:
    """Object key of a frame image in the frames bucket."""
    return f"{org_id}/{recording_id}/frames/frame_{frame_number:04d}.jpg"


class FrameExtractionStage:
    """Samples frames from a recording and uploads them to object storage.

    Extraction is all or nothing: any download, decode or upload failure
    raises ``FrameExtractionError`` and no descriptor is returned. Local
    scratch files live in a temporary directory that is always removed.
    """

    def __init__(
        self,
        frame_extractor: FrameExtractorBase,
        blob_storage: BlobStorageBase,
        settings: Settings,
    ) -> None:
        """Initialize the stage.

        Args:
            frame_extractor: Decoder producing JPEG frames on disk.
            blob_storage: Object storage for source videos and frames.
            settings: Application settings (buckets and sampling defaults).
        """
        self._extractor = frame_extractor
        self._blob = blob_storage
        self._settings = settings
        self._logger = get_logger(__name__)

    def default_sampling(self) -> FrameSamplingConfig:
        """Sampling parameters from settings."""
        extraction = self._settings.frame_extraction
        return FrameSamplingConfig(
            interval_seconds=extraction.interval_seconds,
            max_frames=extraction.max_frames,
            quality=extraction.quality,
            width=extraction.width,
        )

    @timed(level=logging.INFO)
    async def extract_frames(
        self,
        source: VideoSource,
        sampling: FrameSamplingConfig | None = None,
    ) -> list[FrameDescriptor]:
        """Extract, upload and describe the frames of one recording.

        Args:
            source: Where the recording's video lives.
            sampling: Sampling parameters. Defaults to settings.

        Returns:
            Descriptors ordered by frame number. Every image is already
            stored when this returns.

        Raises:
            FrameExtractionError: On any failure. No partial set is returned.
        """
        sampling = sampling or self.default_sampling()

        self._logger.info(
            "Extracting frames",
            extra={
                "recording_id": source.recording_id,
                "org_id": source.org_id,
                "interval_seconds": sampling.interval_seconds,
                "max_frames": sampling.max_frames,
            },
        )

        try:
            with tempfile.TemporaryDirectory(prefix="frames_") as tmp:
                work_dir = Path(tmp)
                video_path = await self._resolve_source(source, work_dir)
                extracted = await self._extractor.extract_frames(
                    video_path,
                    work_dir / "frames",
                    sampling,
                )
                descriptors = await self._upload_frames(source, extracted)
        except FrameExtractionError:
            raise
        except Exception as e:
            self._logger.error(
                "Frame extraction failed",
                extra={
                    "recording_id": source.recording_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise FrameExtractionError(source.recording_id, str(e), cause=e) from e

        self._logger.info(
            "Frames extracted",
            extra={
                "recording_id": source.recording_id,
                "frame_count": len(descriptors),
            },
        )
        return descriptors

    async def _resolve_source(self, source: VideoSource, work_dir: Path) -> Path:
        """Return a local path to the video, downloading it when needed."""
        if source.local_path:
            local = Path(source.local_path)
            if not local.is_file():
                raise FrameExtractionError(
                    source.recording_id,
                    f"video file not found: {local}",
                )
            return local

        if source.object_key:
            local = work_dir / f"source{Path(source.object_key).suffix or '.webm'}"
            await self._blob.download_to_file(
                self._settings.blob_storage.buckets.recordings,
                source.object_key,
                local,
            )
            return local

        raise FrameExtractionError(source.recording_id, "no video source given")

    async def _upload_frames(
        self,
        source: VideoSource,
        extracted: list[ExtractedFrame],
    ) -> list[FrameDescriptor]:
        """Upload frames in bounded batches, failing on the first bad batch.

        Every upload of a batch is awaited before an error is raised.
        """
        batch_size = self._settings.frame_extraction.upload_batch_size
        descriptors: list[FrameDescriptor] = []
        for start in range(0, len(extracted), batch_size):
            batch = extracted[start : start + batch_size]
            results = await asyncio.gather(
                *(self._upload_frame(source, frame) for frame in batch),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
                descriptors.append(result)
        return descriptors

    async def _upload_frame(
        self,
        source: VideoSource,
        frame: ExtractedFrame,
    ) -> FrameDescriptor:
        storage_path = frame_storage_path(
            source.org_id,
            source.recording_id,
            frame.frame_number,
        )
        await self._blob.upload(
            self._settings.blob_storage.buckets.frames,
            storage_path,
            await asyncio.to_thread(frame.path.read_bytes),
            content_type="image/jpeg",
        )
        return FrameDescriptor(
            frame_number=frame.frame_number,
            time_sec=frame.timestamp,
            storage_path=storage_path,
            metadata=FrameMetadata(
                width=frame.width,
                height=frame.height,
                size_bytes=frame.size_bytes,
            ),
        )
