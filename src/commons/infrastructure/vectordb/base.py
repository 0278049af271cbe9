"""Abstract base class for vector database operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal


@dataclass
class VectorPoint:
    """A vector with its ID and payload."""

    id: str
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResult:
    """Result from a single-collection vector search."""

    id: str
    score: float
    payload: dict[str, Any]


@dataclass(frozen=True)
class HierarchicalSearchRow:
    """One chunk row returned by a hierarchical search.

    This is the fixed record type at the backend boundary; raw backend
    payloads are never passed further up.
    """

    id: str
    recording_id: str
    recording_title: str
    chunk_text: str
    similarity: float
    summary_similarity: float
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


class VectorDBBase(ABC):
    """Abstract base class for vector database operations.

    Collections hold one vector size each. Summaries (document level) use
    1536-dim vectors, chunks use 3072-dim vectors and transcript segments
    use 1536-dim vectors.
    """

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        vector_size: int,
        distance_metric: Literal["cosine", "euclidean", "dot"] = "cosine",
        keyword_fields: tuple[str, ...] = ("org_id", "recording_id"),
    ) -> bool:
        """Create a collection if it does not exist.

        Args:
            name: Collection name.
            vector_size: Dimension of vectors.
            distance_metric: Similarity metric.
            keyword_fields: Payload fields to index for filtering.

        Returns:
            True if created, False if already exists.
        """

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        points: list[VectorPoint],
    ) -> int:
        """Insert or update vectors.

        Args:
            collection: Collection name.
            points: List of vectors with IDs and payloads.

        Returns:
            Count of upserted points.
        """

    @abstractmethod
    async def search(
        self,
        collection: str,
        query_vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Args:
            collection: Collection name.
            query_vector: Query embedding.
            limit: Maximum results to return.
            filters: Optional payload filters.
            score_threshold: Minimum similarity score.

        Returns:
            List of search results sorted by similarity.
        """

    @abstractmethod
    async def hierarchical_search(
        self,
        summaries_collection: str,
        chunks_collection: str,
        *,
        query_embedding_low: list[float],
        query_embedding_high: list[float],
        org_id: str,
        top_documents: int,
        chunks_per_document: int,
        match_threshold: float,
        recording_ids: list[str] | None = None,
    ) -> list[HierarchicalSearchRow]:
        """Two-tier search over document summaries and their chunks.

        Documents are ranked by ``query_embedding_low`` against the
        summaries collection and the best ``top_documents`` at or above
        ``match_threshold`` are kept. Chunks of each kept document are then
        ranked by ``query_embedding_high`` and up to ``chunks_per_document``
        are returned per document.

        Args:
            summaries_collection: Collection of 1536-dim summary vectors.
            chunks_collection: Collection of 3072-dim chunk vectors.
            query_embedding_low: 1536-dim query vector.
            query_embedding_high: 3072-dim query vector.
            org_id: Organization scope.
            top_documents: Documents to keep after the coarse tier.
            chunks_per_document: Chunks to return per kept document.
            match_threshold: Minimum similarity in both tiers.
            recording_ids: Optional restriction to specific recordings.

        Returns:
            Rows ordered by document rank, then chunk similarity.
        """

    @abstractmethod
    async def delete_by_filter(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> int:
        """Delete vectors matching filter.

        Args:
            collection: Collection name.
            filters: Payload filters to match.

        Returns:
            Count of deleted vectors.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count vectors in collection.

        Args:
            collection: Collection name.
            filters: Optional payload filters.

        Returns:
            Count of matching vectors.
        """
