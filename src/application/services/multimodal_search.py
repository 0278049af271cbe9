"""Fused transcript and frame search."""

import time
from collections.abc import AsyncIterator
from typing import Any

from src.application.dtos import MultimodalSearchOptions
from src.application.services.embedding import EmbeddingGenerator
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.infrastructure.vectordb.base import SearchResult, VectorDBBase
from src.commons.settings import FeatureFlags
from src.commons.settings.models import Settings
from src.commons.telemetry import correlated, get_logger
from src.domain.exceptions import (
    DomainException,
    EmbeddingGenerationError,
    SearchBackendError,
    ValidationError,
)
from src.domain.models import (
    CombinedResult,
    EmbeddingResolution,
    Frame,
    Modality,
    MultimodalSearchMetadata,
    MultimodalSearchResponse,
    TranscriptSearchResult,
    VisualSearchResult,
    clamp_similarity,
    cosine_similarity,
)


class MultimodalSearchService:
    """Searches transcripts and, optionally, video frames with one query.

    Transcript and frame similarities are clamped to ``[0, 1]`` and fused
    into one ranking with per-modality weights.
    """

    def __init__(
        self,
        embedding_generator: EmbeddingGenerator,
        vector_db: VectorDBBase,
        document_db: DocumentDBBase,
        settings: Settings,
        feature_flags: FeatureFlags | None = None,
        blob_storage: BlobStorageBase | None = None,
    ) -> None:
        """Initialize the search service.

        Args:
            embedding_generator: Produces the 1536-dim query embedding.
            vector_db: Backend holding transcript vectors.
            document_db: Store holding frame rows and their embeddings.
            settings: Application settings.
            feature_flags: Source of the visual search flag.
            blob_storage: Optional storage used to presign frame URLs.
        """
        self._embedder = embedding_generator
        self._vector_db = vector_db
        self._document_db = document_db
        self._settings = settings
        self._flags = feature_flags or FeatureFlags()
        self._blob = blob_storage
        self._frames_collection = settings.document_db.collections.video_frames
        self._logger = get_logger(__name__)

    @correlated
    async def multimodal_search(
        self,
        query: str,
        options: MultimodalSearchOptions,
    ) -> MultimodalSearchResponse:
        """Search transcripts and frames and fuse the results.

        Args:
            query: Natural-language query.
            options: Scope, weights, threshold and limit.

        Returns:
            Per-modality results, the fused ranking and metadata.

        Raises:
            ValidationError: If the query or options are invalid.
            SearchBackendError: If embedding or a backend call fails.
        """
        self._validate(query, options.org_id, options.threshold, options.limit)
        if options.audio_weight < 0:
            raise ValidationError("audio_weight", "must be >= 0")
        if options.visual_weight < 0:
            raise ValidationError("visual_weight", "must be >= 0")

        start_time = time.perf_counter()
        include_frames = (
            options.include_frames or self._flags.snapshot().visual_search_enabled
        )
        query_vector = await self._embed_query(query)

        try:
            transcript_results = await self._search_transcripts(
                query_vector,
                options.org_id,
                options.limit,
                options.recording_ids,
            )
            visual_results: list[VisualSearchResult] = []
            if include_frames:
                visual_results = await self._search_frames(
                    query_vector,
                    options.org_id,
                    options.limit,
                    options.threshold,
                    options.recording_ids,
                )
        except DomainException:
            raise
        except Exception as e:
            self._logger.error(
                "Multimodal search backend failed",
                extra={"org_id": options.org_id, "error": str(e)},
            )
            raise SearchBackendError("Multimodal search failed", str(e)) from e

        combined = self.fuse(
            transcript_results,
            visual_results,
            options.audio_weight,
            options.visual_weight,
        )
        processing_time_ms = (time.perf_counter() - start_time) * 1000

        self._logger.info(
            "Multimodal search completed",
            extra={
                "org_id": options.org_id,
                "include_frames": include_frames,
                "transcript_count": len(transcript_results),
                "visual_count": len(visual_results),
                "duration_ms": round(processing_time_ms, 2),
            },
        )

        return MultimodalSearchResponse(
            transcript_results=transcript_results,
            visual_results=visual_results,
            combined_results=combined,
            metadata=MultimodalSearchMetadata(
                transcript_count=len(transcript_results),
                visual_count=len(visual_results),
                total_count=len(combined),
                audio_weight=options.audio_weight,
                visual_weight=options.visual_weight,
                threshold=options.threshold,
                processing_time_ms=processing_time_ms,
            ),
        )

    @correlated
    async def visual_search(
        self,
        query: str,
        org_id: str,
        limit: int = 20,
        threshold: float = 0.0,
        recording_ids: list[str] | None = None,
    ) -> list[VisualSearchResult]:
        """Search video frames only.

        Returns:
            Frames at or above ``threshold``, best first, at most ``limit``.
        """
        self._validate(query, org_id, threshold, limit)
        query_vector = await self._embed_query(query)
        try:
            return await self._search_frames(
                query_vector,
                org_id,
                limit,
                threshold,
                recording_ids,
            )
        except Exception as e:
            raise SearchBackendError("Multimodal search failed", str(e)) from e

    async def get_frame_count(self, recording_id: str) -> int:
        """Number of stored frame rows for a recording."""
        return await self._document_db.count(
            self._frames_collection,
            {"recording_id": recording_id},
        )

    async def has_extracted_frames(self, recording_id: str) -> bool:
        """Whether frame extraction stored any frame for a recording."""
        return await self.get_frame_count(recording_id) > 0

    @staticmethod
    def fuse(
        transcript_results: list[TranscriptSearchResult],
        visual_results: list[VisualSearchResult],
        audio_weight: float,
        visual_weight: float,
    ) -> list[CombinedResult]:
        """Weight each modality's similarities into one ranking.

        Args:
            transcript_results: Audio modality results.
            visual_results: Visual modality results.
            audio_weight: Multiplier for transcript similarities.
            visual_weight: Multiplier for frame similarities.

        Returns:
            Combined results sorted by score, highest first.
        """
        combined = [
            CombinedResult(
                modality=Modality.AUDIO,
                score=audio_weight * clamp_similarity(r.similarity),
                similarity=r.similarity,
                recording_id=r.recording_id,
                transcript=r,
            )
            for r in transcript_results
        ]
        combined.extend(
            CombinedResult(
                modality=Modality.VISUAL,
                score=visual_weight * r.similarity,
                similarity=r.similarity,
                recording_id=r.recording_id,
                visual=r,
            )
            for r in visual_results
        )
        combined.sort(key=lambda r: r.score, reverse=True)
        return combined

    async def _embed_query(self, query: str) -> list[float]:
        try:
            return await self._embedder.embed(query, EmbeddingResolution.LOW)
        except EmbeddingGenerationError as e:
            raise SearchBackendError(
                "Failed to generate query embedding",
                e.reason,
            ) from e

    async def _search_transcripts(
        self,
        query_vector: list[float],
        org_id: str,
        limit: int,
        recording_ids: list[str] | None,
    ) -> list[TranscriptSearchResult]:
        filters: dict[str, Any] = {"org_id": org_id}
        if recording_ids:
            filters["recording_id"] = {"$in": recording_ids}

        hits = await self._vector_db.search(
            self._settings.vector_db.collections.transcripts,
            query_vector,
            limit=limit,
            filters=filters,
        )
        return [self._to_transcript_result(hit) for hit in hits]

    async def _search_frames(
        self,
        query_vector: list[float],
        org_id: str,
        limit: int,
        threshold: float,
        recording_ids: list[str] | None,
    ) -> list[VisualSearchResult]:
        filters: dict[str, Any] = {
            "org_id": org_id,
            "visual_embedding": {"$ne": None},
        }
        if recording_ids:
            filters["recording_id"] = {"$in": recording_ids}

        scored: list[tuple[float, Frame]] = []
        async for row in self._iter_frame_rows(filters):
            frame = Frame.model_validate(row)
            if not frame.visual_embedding:
                continue
            if len(frame.visual_embedding) != len(query_vector):
                self._logger.debug(
                    "Skipping frame with mismatched embedding",
                    extra={"frame_id": frame.id},
                )
                continue
            similarity = clamp_similarity(
                cosine_similarity(query_vector, frame.visual_embedding)
            )
            if similarity >= threshold:
                scored.append((similarity, frame))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            VisualSearchResult(
                frame_id=frame.id,
                recording_id=frame.recording_id,
                timestamp_sec=frame.frame_time_sec,
                description=frame.visual_description or "",
                ocr_text=frame.ocr_text,
                similarity=similarity,
                frame_url=await self._frame_url(frame.frame_url),
                scene_type=frame.scene_type.value if frame.scene_type else None,
            )
            for similarity, frame in scored[:limit]
        ]

    async def _iter_frame_rows(
        self,
        filters: dict[str, Any],
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield every matching frame row, one page at a time."""
        page_size = self._settings.search.visual_scan_page_size
        skip = 0
        while True:
            rows = await self._document_db.find(
                self._frames_collection,
                filters,
                skip=skip,
                limit=page_size,
                sort=[("recording_id", 1), ("frame_number", 1)],
            )
            for row in rows:
                yield row
            if len(rows) < page_size:
                return
            skip += page_size

    async def _frame_url(self, storage_path: str) -> str:
        """Presigned URL for a frame image, or its storage path."""
        if self._blob is None:
            return storage_path
        try:
            return await self._blob.generate_presigned_url(
                self._settings.blob_storage.buckets.frames,
                storage_path,
                expiry_seconds=self._settings.blob_storage.presigned_url_expiry_seconds,
            )
        except Exception as e:
            self._logger.debug(
                "Could not presign frame URL",
                extra={"path": storage_path, "error": str(e)},
            )
            return storage_path

    @staticmethod
    def _to_transcript_result(hit: SearchResult) -> TranscriptSearchResult:
        payload = hit.payload
        metadata = payload.get("metadata") or {}
        timestamp = payload.get("start_time", metadata.get("start_time"))
        return TranscriptSearchResult(
            chunk_id=str(payload.get("chunk_id", hit.id)),
            recording_id=str(payload.get("recording_id", "")),
            recording_title=str(payload.get("recording_title", "")),
            text=str(payload.get("chunk_text", payload.get("text", ""))),
            similarity=clamp_similarity(hit.score),
            timestamp=float(timestamp) if timestamp is not None else None,
        )

    @staticmethod
    def _validate(query: str, org_id: str, threshold: float, limit: int) -> None:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query", "must be a non-empty string")
        if not org_id or not org_id.strip():
            raise ValidationError("org_id", "must be a non-empty string")
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError("threshold", "must be between 0 and 1")
        if limit < 1:
            raise ValidationError("limit", "must be >= 1")
