"""Unit tests for HierarchicalSearchService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.dtos import HierarchicalSearchOptions, HierarchicalSearchRow
from src.application.services.embedding import EmbeddingGenerator
from src.application.services.hierarchical_search import HierarchicalSearchService
from src.domain.exceptions import SearchBackendError, ValidationError


def _row(chunk_id: str, recording_id: str = "rec-1", similarity: float = 0.9):
    return HierarchicalSearchRow(
        id=chunk_id,
        recording_id=recording_id,
        recording_title=f"Title {recording_id}",
        chunk_text=f"text of {chunk_id}",
        similarity=similarity,
        summary_similarity=0.8,
        metadata={"start_time": 12.5},
    )


@pytest.fixture
def vector_db():
    db = MagicMock()
    db.hierarchical_search = AsyncMock(return_value=[])
    return db


@pytest.fixture
def service(embedding_service, vector_db, document_db, settings):
    return HierarchicalSearchService(
        embedding_generator=EmbeddingGenerator(embedding_service),
        vector_db=vector_db,
        document_db=document_db,
        settings=settings,
    )


class TestHierarchicalSearchOptions:
    """Tests for option defaults."""

    def test_defaults(self):
        options = HierarchicalSearchOptions(org_id="org-1")
        assert options.top_documents == 5
        assert options.chunks_per_document == 3
        assert options.threshold == 0.7
        assert options.recording_ids is None


class TestHierarchicalSearch:
    """Tests for the two-tier search."""

    async def test_passes_both_vectors_and_defaults(self, service, vector_db):
        await service.hierarchical_search(
            "how do I deploy", HierarchicalSearchOptions(org_id="org-1")
        )

        args = vector_db.hierarchical_search.await_args
        assert args.args == ("recording_summaries", "recording_chunks")
        assert len(args.kwargs["query_embedding_low"]) == 1536
        assert len(args.kwargs["query_embedding_high"]) == 3072
        assert args.kwargs["org_id"] == "org-1"
        assert args.kwargs["top_documents"] == 5
        assert args.kwargs["chunks_per_document"] == 3
        assert args.kwargs["match_threshold"] == 0.7

    async def test_deduplicates_keeping_first(self, service, vector_db):
        vector_db.hierarchical_search.return_value = [
            _row("c1", similarity=0.95),
            _row("c1", similarity=0.75),
            _row("c2", similarity=0.85),
        ]

        results = await service.hierarchical_search(
            "query", HierarchicalSearchOptions(org_id="org-1")
        )

        assert [r.id for r in results] == ["c1", "c2"]
        assert results[0].similarity == 0.95
        assert results[0].recording_title == "Title rec-1"
        assert results[0].metadata == {"start_time": 12.5}

    async def test_empty_backend_result(self, service):
        results = await service.hierarchical_search(
            "query", HierarchicalSearchOptions(org_id="org-1", threshold=1.0)
        )
        assert results == []

    @pytest.mark.parametrize(
        ("query", "options", "field"),
        [
            ("", {"org_id": "org-1"}, "query"),
            ("q", {"org_id": " "}, "org_id"),
            ("q", {"org_id": "o", "top_documents": 0}, "top_documents"),
            ("q", {"org_id": "o", "chunks_per_document": 0}, "chunks_per_document"),
            ("q", {"org_id": "o", "threshold": 1.5}, "threshold"),
            ("q", {"org_id": "o", "threshold": -0.1}, "threshold"),
        ],
    )
    async def test_validation(self, service, vector_db, query, options, field):
        with pytest.raises(ValidationError) as exc_info:
            await service.hierarchical_search(
                query, HierarchicalSearchOptions(**options)
            )

        assert exc_info.value.field == field
        vector_db.hierarchical_search.assert_not_awaited()

    async def test_embedding_failure(self, service, embedding_service, vector_db):
        embedding_service.embed_text = AsyncMock(side_effect=RuntimeError("401"))

        with pytest.raises(SearchBackendError) as exc_info:
            await service.hierarchical_search(
                "query", HierarchicalSearchOptions(org_id="org-1")
            )

        assert str(exc_info.value).startswith("Failed to generate dual embeddings")
        vector_db.hierarchical_search.assert_not_awaited()

    async def test_backend_failure(self, service, vector_db):
        vector_db.hierarchical_search.side_effect = ConnectionError("qdrant down")

        with pytest.raises(SearchBackendError) as exc_info:
            await service.hierarchical_search(
                "query", HierarchicalSearchOptions(org_id="org-1")
            )

        assert str(exc_info.value) == "Hierarchical search failed: qdrant down"


class TestHierarchicalSearchRecording:
    """Tests for single-recording search."""

    async def test_pins_one_document_and_recording(self, service, vector_db):
        vector_db.hierarchical_search.return_value = [
            _row("c1", "rec-9"),
            _row("c2", "rec-other"),
        ]

        results = await service.hierarchical_search_recording(
            "rec-9", "query", "org-1"
        )

        kwargs = vector_db.hierarchical_search.await_args.kwargs
        assert kwargs["top_documents"] == 1
        assert kwargs["chunks_per_document"] == 10
        assert kwargs["match_threshold"] == 0.7
        assert kwargs["recording_ids"] == ["rec-9"]
        assert [r.id for r in results] == ["c1"]

    async def test_overrides(self, service, vector_db):
        await service.hierarchical_search_recording(
            "rec-9", "query", "org-1", chunks_per_document=4, threshold=0.5
        )

        kwargs = vector_db.hierarchical_search.await_args.kwargs
        assert kwargs["chunks_per_document"] == 4
        assert kwargs["match_threshold"] == 0.5

    async def test_blank_recording_id(self, service):
        with pytest.raises(ValidationError):
            await service.hierarchical_search_recording("", "query", "org-1")


class TestGetRecordingSummaries:
    """Tests for summary listing."""

    async def test_newest_first_and_scoped(self, service, document_db):
        for i, day in enumerate([1, 3, 2]):
            await document_db.upsert(
                "recording_summaries",
                f"s{i}",
                {
                    "recording_id": f"rec-{i}",
                    "org_id": "org-1",
                    "summary_text": f"summary {i}",
                    "created_at": datetime(2024, 1, day, tzinfo=UTC),
                },
            )
        await document_db.upsert(
            "recording_summaries",
            "other",
            {
                "recording_id": "rec-x",
                "org_id": "org-2",
                "created_at": datetime(2024, 2, 1, tzinfo=UTC),
            },
        )

        summaries = await service.get_recording_summaries("org-1", limit=2)

        assert [s.id for s in summaries] == ["s1", "s2"]

    async def test_store_failure(self, service, document_db):
        document_db.find = AsyncMock(side_effect=ConnectionError("timeout"))

        with pytest.raises(SearchBackendError) as exc_info:
            await service.get_recording_summaries("org-1")

        assert str(exc_info.value).startswith("Failed to fetch summaries")
