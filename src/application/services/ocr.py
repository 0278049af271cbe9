"""OCR stage: on-screen text for extracted frames."""

from src.application.services.batching import run_frame_batches
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.telemetry import get_logger
from src.domain.models import FrameDescriptor, FrameOutcome, OCRResult
from src.infrastructure.ocr.base import OCRServiceBase


class OCRStage:
    """Runs OCR over frame images stored in the frames bucket.

    Holds no per-frame state, so frames of one batch are recognized
    concurrently. One frame failing never affects the others.
    """

    def __init__(
        self,
        ocr_service: OCRServiceBase,
        blob_storage: BlobStorageBase,
        frames_bucket: str,
        batch_size: int = 5,
    ) -> None:
        """Initialize the OCR stage.

        Args:
            ocr_service: OCR engine.
            blob_storage: Storage the frame images are read from.
            frames_bucket: Bucket holding frame images.
            batch_size: Default number of frames recognized concurrently.
        """
        self._ocr = ocr_service
        self._blob = blob_storage
        self._frames_bucket = frames_bucket
        self._batch_size = batch_size
        self._logger = get_logger(__name__)

    async def extract_frame_text(self, frame_image: bytes) -> OCRResult:
        """Recognize text in one encoded frame image."""
        return await self._ocr.recognize(frame_image)

    async def extract_frames_text(
        self,
        frames: list[FrameDescriptor],
        batch_size: int | None = None,
    ) -> list[FrameOutcome[OCRResult]]:
        """Recognize text on many frames.

        Args:
            frames: Frames to process, already stored in the frames bucket.
            batch_size: Frames per batch. Defaults to the configured size.

        Returns:
            One outcome per frame in input order. Failed frames carry an
            error instead of a result.
        """
        if not frames:
            return []

        outcomes = await run_frame_batches(
            "ocr",
            frames,
            self._recognize_frame,
            lambda frame: frame.frame_number,
            batch_size or self._batch_size,
        )

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        self._logger.info(
            "OCR completed",
            extra={
                "frame_count": len(frames),
                "succeeded": len(frames) - failed,
                "failed": failed,
            },
        )
        return outcomes

    async def _recognize_frame(self, frame: FrameDescriptor) -> OCRResult:
        image = await self._blob.download(self._frames_bucket, frame.storage_path)
        return await self.extract_frame_text(image)
