"""Visual indexing stage: vision-model descriptions and embeddings for frames."""

import json
import re
from datetime import UTC, datetime
from typing import Any

from src.application.dtos import VisualIndexingReport
from src.application.services.batching import run_frame_batches
from src.application.services.embedding import EmbeddingGenerator
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger, langfuse_trace, timed
from src.domain.models import (
    EmbeddingResolution,
    Frame,
    FrameDescription,
    SceneType,
)
from src.infrastructure.llm.base import (
    ImageContent,
    LLMServiceBase,
    Message,
    MessageRole,
)

DESCRIBE_FRAME_PROMPT = """Analyze this screenshot from a screen recording.
Return a JSON object only:
{
  "description": "2-3 sentences describing the visible content",
  "scene_type": "ui|code|terminal|browser|editor|other",
  "detected_elements": ["up to 5 key elements"],
  "confidence": 0.0-1.0
}
Focus on visible text, UI components, code, user actions and technical details."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_MAX_DETECTED_ELEMENTS = 5


def parse_frame_description(raw: str) -> FrameDescription:
    """Parse a vision model reply into a FrameDescription.

    Replies without a usable JSON object fall back to the raw text as the
    description with scene type ``other``.

    Args:
        raw: Model output.

    Returns:
        The parsed description.
    """
    text = raw.strip()
    match = _JSON_OBJECT.search(text)
    data: Any = None
    if match:
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            data = None

    if not isinstance(data, dict) or not str(data.get("description", "")).strip():
        return FrameDescription(description=text, scene_type=SceneType.OTHER)

    try:
        scene_type = SceneType(str(data.get("scene_type", "other")).lower())
    except ValueError:
        scene_type = SceneType.OTHER

    elements = data.get("detected_elements") or []
    if not isinstance(elements, list):
        elements = [elements]

    confidence = data.get("confidence")
    try:
        confidence = float(confidence) if confidence is not None else None
    except (TypeError, ValueError):
        confidence = None

    return FrameDescription(
        description=str(data["description"]).strip(),
        scene_type=scene_type,
        detected_elements=[str(e) for e in elements][:_MAX_DETECTED_ELEMENTS],
        confidence=confidence,
    )


class VisualIndexingStage:
    """Describes and embeds frames that have no visual description yet.

    Frames are processed in bounded batches: batches run sequentially and the
    frames of a batch concurrently. A frame row is only updated once both its
    description and its embedding exist, so a failed frame keeps a null
    description and is picked up again by the next run.
    """

    def __init__(
        self,
        llm_service: LLMServiceBase,
        embedding_generator: EmbeddingGenerator,
        document_db: DocumentDBBase,
        blob_storage: BlobStorageBase,
        settings: Settings,
    ) -> None:
        """Initialize the visual indexing stage.

        Args:
            llm_service: Vision-capable LLM.
            embedding_generator: Produces 1536-dim description embeddings.
            document_db: Store holding frame rows.
            blob_storage: Storage the frame images are read from.
            settings: Application settings.
        """
        self._llm = llm_service
        self._embedder = embedding_generator
        self._document_db = document_db
        self._blob = blob_storage
        self._settings = settings
        self._frames_collection = settings.document_db.collections.video_frames
        self._logger = get_logger(__name__)

    @timed
    async def index_recording_frames(
        self,
        recording_id: str,
        org_id: str,
    ) -> VisualIndexingReport:
        """Index every undescribed frame of a recording.

        Args:
            recording_id: Recording whose frames are indexed.
            org_id: Owning organization.

        Returns:
            Counts of frames found, indexed and failed.
        """
        frames = await self._pending_frames(recording_id, org_id)
        report = VisualIndexingReport(recording_id=recording_id, total=len(frames))
        if not frames:
            self._logger.info(
                "No frames awaiting visual indexing",
                extra={"recording_id": recording_id},
            )
            return report

        self._logger.info(
            "Starting visual indexing",
            extra={
                "recording_id": recording_id,
                "frame_count": len(frames),
                "batch_size": self._settings.visual_indexing.batch_size,
            },
        )

        with langfuse_trace(
            "visual_indexing",
            metadata={"recording_id": recording_id, "org_id": org_id},
            tags=["frames"],
        ):
            outcomes = await run_frame_batches(
                "visual_indexing",
                frames,
                self._index_frame,
                lambda frame: frame.frame_number,
                self._settings.visual_indexing.batch_size,
            )

        for outcome in outcomes:
            if outcome.ok:
                report.indexed += 1
                continue
            report.failed += 1
            report.failed_frames.append(outcome.frame_number)
            await self._record_failure(
                recording_id, outcome.frame_number, outcome.error
            )

        self._logger.info(
            "Visual indexing completed",
            extra={
                "recording_id": recording_id,
                "indexed": report.indexed,
                "failed": report.failed,
            },
        )
        return report

    async def describe_frame(
        self,
        image: bytes,
        frame_time_sec: float | None = None,
    ) -> FrameDescription:
        """Ask the vision model to describe one frame image.

        Args:
            image: JPEG bytes of the frame.
            frame_time_sec: Offset of the frame, added to the prompt as context.

        Returns:
            Parsed description.
        """
        prompt = DESCRIBE_FRAME_PROMPT
        if frame_time_sec is not None:
            prompt = f"Frame at {frame_time_sec:.1f}s.\n{prompt}"

        response = await self._llm.generate(
            [
                Message(
                    role=MessageRole.USER,
                    content=prompt,
                    images=[ImageContent(data=image)],
                )
            ],
            temperature=self._settings.llm.temperature,
            max_tokens=self._settings.llm.max_tokens,
            json_mode=True,
        )
        return parse_frame_description(response.content)

    async def _pending_frames(self, recording_id: str, org_id: str) -> list[Frame]:
        rows = await self._document_db.find(
            self._frames_collection,
            {
                "recording_id": recording_id,
                "org_id": org_id,
                "visual_description": None,
            },
            limit=0,
            sort=[("frame_number", 1)],
        )
        return [Frame.model_validate(row) for row in rows]

    async def _index_frame(self, frame: Frame) -> FrameDescription:
        image = await self._blob.download(
            self._settings.blob_storage.buckets.frames,
            frame.frame_url,
        )
        description = await self.describe_frame(image, frame.frame_time_sec)
        embedding = await self._embedder.embed(
            description.description,
            EmbeddingResolution.LOW,
        )

        await self._document_db.update(
            self._frames_collection,
            frame.id,
            {
                "visual_description": description.description,
                "scene_type": description.scene_type.value,
                "detected_elements": description.detected_elements,
                "visual_embedding": embedding,
                "visual_indexing_error": None,
                "processed_at": datetime.now(UTC),
            },
        )
        return description

    async def _record_failure(
        self,
        recording_id: str,
        frame_number: int,
        error: str | None,
    ) -> None:
        try:
            await self._document_db.update(
                self._frames_collection,
                Frame.row_id(recording_id, frame_number),
                {"visual_indexing_error": error},
            )
        except Exception as e:
            self._logger.warning(
                "Could not record frame failure",
                extra={
                    "recording_id": recording_id,
                    "frame_number": frame_number,
                    "error": str(e),
                },
            )
