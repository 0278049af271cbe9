"""Two-tier document then chunk search over recording transcripts."""

import time

from src.application.dtos import HierarchicalSearchOptions, HierarchicalSearchRow
from src.application.services.embedding import EmbeddingGenerator
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.infrastructure.vectordb.base import VectorDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import correlated, get_logger, log_exceptions
from src.domain.exceptions import (
    EmbeddingGenerationError,
    SearchBackendError,
    ValidationError,
)
from src.domain.models import ChunkResult, DualEmbedding, RecordingSummary


class HierarchicalSearchService:
    """Finds relevant chunks by ranking documents first, then their chunks.

    Documents are ranked with the 1536-dim summary vectors; chunks inside the
    kept documents with the 3072-dim chunk vectors. The similarity threshold
    applies to both tiers.
    """

    def __init__(
        self,
        embedding_generator: EmbeddingGenerator,
        vector_db: VectorDBBase,
        document_db: DocumentDBBase,
        settings: Settings,
    ) -> None:
        """Initialize the search service.

        Args:
            embedding_generator: Produces the dual query embedding.
            vector_db: Backend running the combined two-tier query.
            document_db: Store holding recording summaries.
            settings: Application settings (collections, defaults).
        """
        self._embedder = embedding_generator
        self._vector_db = vector_db
        self._document_db = document_db
        self._settings = settings
        self._logger = get_logger(__name__)

    @correlated
    async def hierarchical_search(
        self,
        query: str,
        options: HierarchicalSearchOptions,
    ) -> list[ChunkResult]:
        """Search the organization's corpus.

        Args:
            query: Natural-language query.
            options: Organization scope, tier sizes and threshold.

        Returns:
            Chunks ordered by document rank, then chunk similarity, without
            duplicate chunk ids. Empty when nothing passes the threshold.

        Raises:
            ValidationError: If the query or options are invalid.
            SearchBackendError: If embedding or the backend query fails.
        """
        self._validate(query, options)
        start_time = time.perf_counter()

        embedding = await self._embed_query(query)

        try:
            rows = await self._vector_db.hierarchical_search(
                self._settings.vector_db.collections.summaries,
                self._settings.vector_db.collections.chunks,
                query_embedding_low=embedding.vector_low,
                query_embedding_high=embedding.vector_high,
                org_id=options.org_id,
                top_documents=options.top_documents,
                chunks_per_document=options.chunks_per_document,
                match_threshold=options.threshold,
                recording_ids=options.recording_ids,
            )
        except Exception as e:
            self._logger.error(
                "Hierarchical search backend failed",
                extra={"org_id": options.org_id, "error": str(e)},
            )
            raise SearchBackendError("Hierarchical search failed", str(e)) from e

        results = self._deduplicate(rows)

        self._logger.info(
            "Hierarchical search completed",
            extra={
                "org_id": options.org_id,
                "top_documents": options.top_documents,
                "chunks_per_document": options.chunks_per_document,
                "threshold": options.threshold,
                "result_count": len(results),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        return results

    @correlated
    async def hierarchical_search_recording(
        self,
        recording_id: str,
        query: str,
        org_id: str,
        chunks_per_document: int | None = None,
        threshold: float | None = None,
    ) -> list[ChunkResult]:
        """Search the chunks of a single recording.

        Args:
            recording_id: Recording to search.
            query: Natural-language query.
            org_id: Owning organization.
            chunks_per_document: Chunks to return. Defaults to settings (10).
            threshold: Minimum similarity. Defaults to settings (0.7).

        Returns:
            Chunks of that recording only.
        """
        if not recording_id or not recording_id.strip():
            raise ValidationError("recording_id", "must be a non-empty string")

        search_settings = self._settings.search
        options = HierarchicalSearchOptions(
            org_id=org_id,
            top_documents=1,
            chunks_per_document=(
                chunks_per_document
                if chunks_per_document is not None
                else search_settings.recording_chunks_per_document
            ),
            threshold=(
                threshold if threshold is not None else search_settings.match_threshold
            ),
            recording_ids=[recording_id],
        )
        results = await self.hierarchical_search(query, options)
        return [r for r in results if r.recording_id == recording_id]

    @correlated
    @log_exceptions(message="Fetching recording summaries failed")
    async def get_recording_summaries(
        self,
        org_id: str,
        limit: int = 10,
    ) -> list[RecordingSummary]:
        """List an organization's recording summaries, newest first.

        Raises:
            ValidationError: If org_id is blank or limit is not positive.
            SearchBackendError: If the store cannot be read.
        """
        if not org_id or not org_id.strip():
            raise ValidationError("org_id", "must be a non-empty string")
        if limit < 1:
            raise ValidationError("limit", "must be >= 1")

        try:
            rows = await self._document_db.find(
                self._settings.document_db.collections.recording_summaries,
                {"org_id": org_id},
                limit=limit,
                sort=[("created_at", -1)],
            )
        except Exception as e:
            raise SearchBackendError("Failed to fetch summaries", str(e)) from e

        return [RecordingSummary.model_validate(row) for row in rows]

    def default_options(self, org_id: str) -> HierarchicalSearchOptions:
        """Options filled from search settings."""
        search_settings = self._settings.search
        return HierarchicalSearchOptions(
            org_id=org_id,
            top_documents=search_settings.top_documents,
            chunks_per_document=search_settings.chunks_per_document,
            threshold=search_settings.match_threshold,
        )

    async def _embed_query(self, query: str) -> DualEmbedding:
        try:
            return await self._embedder.embed_dual(query)
        except EmbeddingGenerationError as e:
            raise SearchBackendError(
                "Failed to generate dual embeddings",
                e.reason,
            ) from e

    @staticmethod
    def _deduplicate(rows: list[HierarchicalSearchRow]) -> list[ChunkResult]:
        seen: set[str] = set()
        results: list[ChunkResult] = []
        for row in rows:
            if row.id in seen:
                continue
            seen.add(row.id)
            results.append(
                ChunkResult(
                    id=row.id,
                    recording_id=row.recording_id,
                    recording_title=row.recording_title,
                    chunk_text=row.chunk_text,
                    similarity=row.similarity,
                    summary_similarity=row.summary_similarity,
                    metadata=dict(row.metadata),
                    created_at=row.created_at,
                )
            )
        return results

    @staticmethod
    def _validate(query: str, options: HierarchicalSearchOptions) -> None:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query", "must be a non-empty string")
        if not options.org_id or not options.org_id.strip():
            raise ValidationError("org_id", "must be a non-empty string")
        if options.top_documents < 1:
            raise ValidationError("top_documents", "must be >= 1")
        if options.chunks_per_document < 1:
            raise ValidationError("chunks_per_document", "must be >= 1")
        if not 0.0 <= options.threshold <= 1.0:
            raise ValidationError("threshold", "must be between 0 and 1")
