"""Qdrant implementation of vector database."""

import asyncio
from datetime import datetime
from typing import Any, Literal

from qdrant_client import AsyncQdrantClient, models

from src.commons.infrastructure.vectordb.base import (
    HierarchicalSearchRow,
    SearchResult,
    VectorDBBase,
    VectorPoint,
)

_RANGE_OPERATORS = {"$gte": "gte", "$gt": "gt", "$lte": "lte", "$lt": "lt"}


class QdrantVectorDB(VectorDBBase):
    """Qdrant implementation of vector database.

    Supports both local Qdrant and Qdrant Cloud.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        grpc_port: int = 6334,
        api_key: str | None = None,
        url: str | None = None,
        prefer_grpc: bool = True,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant client.

        Args:
            host: Qdrant server host.
            port: Qdrant HTTP port.
            grpc_port: Qdrant gRPC port.
            api_key: API key for Qdrant Cloud.
            url: Full URL (overrides host/port, for Qdrant Cloud).
            prefer_grpc: Use gRPC for operations (faster).
            client: Pre-built client, mainly for tests.
        """
        if client is not None:
            self._client = client
        elif url:
            self._client = AsyncQdrantClient(
                url=url,
                api_key=api_key,
                prefer_grpc=prefer_grpc,
            )
        else:
            self._client = AsyncQdrantClient(
                host=host,
                port=port,
                grpc_port=grpc_port,
                api_key=api_key,
                prefer_grpc=prefer_grpc,
            )

    async def create_collection(
        self,
        name: str,
        vector_size: int,
        distance_metric: Literal["cosine", "euclidean", "dot"] = "cosine",
        keyword_fields: tuple[str, ...] = ("org_id", "recording_id"),
    ) -> bool:
        """Create a collection if it does not exist."""
        if await self._client.collection_exists(collection_name=name):
            return False

        distance_map = {
            "cosine": models.Distance.COSINE,
            "euclidean": models.Distance.EUCLID,
            "dot": models.Distance.DOT,
        }

        await self._client.create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(
                size=vector_size,
                distance=distance_map[distance_metric],
            ),
        )
        for field_name in keyword_fields:
            await self._client.create_payload_index(
                collection_name=name,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )
        return True

    async def upsert(
        self,
        collection: str,
        points: list[VectorPoint],
    ) -> int:
        """Insert or update vectors."""
        if not points:
            return 0

        await self._client.upsert(
            collection_name=collection,
            points=[
                models.PointStruct(
                    id=point.id,
                    vector=point.vector,
                    payload=point.payload,
                )
                for point in points
            ],
        )
        return len(points)

    async def search(
        self,
        collection: str,
        query_vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors."""
        response = await self._client.query_points(
            collection_name=collection,
            query=query_vector,
            limit=limit,
            query_filter=self._build_filter(filters) if filters else None,
            score_threshold=score_threshold,
            with_payload=True,
        )

        return [
            SearchResult(
                id=str(point.id),
                score=point.score or 0.0,
                payload=point.payload or {},
            )
            for point in response.points
        ]

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
        """Two-tier search over document summaries and their chunks."""
        summary_filters: dict[str, Any] = {"org_id": org_id}
        if recording_ids:
            summary_filters["recording_id"] = {"$in": recording_ids}

        documents = await self.search(
            summaries_collection,
            query_embedding_low,
            limit=top_documents,
            filters=summary_filters,
            score_threshold=match_threshold,
        )
        if not documents:
            return []

        per_document = await asyncio.gather(
            *(
                self.search(
                    chunks_collection,
                    query_embedding_high,
                    limit=chunks_per_document,
                    filters={
                        "org_id": org_id,
                        "recording_id": str(doc.payload.get("recording_id", "")),
                    },
                    score_threshold=match_threshold,
                )
                for doc in documents
            )
        )

        rows: list[HierarchicalSearchRow] = []
        for doc, chunks in zip(documents, per_document, strict=True):
            rows.extend(self._to_row(chunk, doc) for chunk in chunks)
        return rows

    async def delete_by_filter(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> int:
        """Delete vectors matching filter."""
        count_before = await self.count(collection, filters)

        await self._client.delete(
            collection_name=collection,
            points_selector=models.FilterSelector(filter=self._build_filter(filters)),
        )
        return count_before

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count vectors in collection."""
        result = await self._client.count(
            collection_name=collection,
            count_filter=self._build_filter(filters) if filters else None,
            exact=True,
        )
        return int(result.count)

    @staticmethod
    def _to_row(chunk: SearchResult, document: SearchResult) -> HierarchicalSearchRow:
        """Map a chunk hit and its parent summary hit to a typed row."""
        payload = chunk.payload
        created_at = payload.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        return HierarchicalSearchRow(
            id=str(payload.get("chunk_id", chunk.id)),
            recording_id=str(payload.get("recording_id", "")),
            recording_title=str(
                payload.get("recording_title")
                or document.payload.get("recording_title", "")
            ),
            chunk_text=str(payload.get("chunk_text", "")),
            similarity=chunk.score,
            summary_similarity=document.score,
            metadata=dict(payload.get("metadata") or {}),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )

    def _build_filter(self, filters: dict[str, Any]) -> models.Filter:
        """Build Qdrant filter from dict.

        Supports:
        - Simple equality: {"field": "value"}
        - Range: {"field": {"$gte": 10, "$lt": 20}}
        - In list: {"field": {"$in": [1, 2, 3]}}
        """
        conditions: list[models.Condition] = []

        for key, value in filters.items():
            if not isinstance(value, dict):
                conditions.append(
                    models.FieldCondition(
                        key=key,
                        match=models.MatchValue(value=value),
                    )
                )
                continue

            bounds = {
                _RANGE_OPERATORS[op]: op_value
                for op, op_value in value.items()
                if op in _RANGE_OPERATORS
            }
            if bounds:
                conditions.append(
                    models.FieldCondition(key=key, range=models.Range(**bounds))
                )
            if "$in" in value:
                conditions.append(
                    models.FieldCondition(
                        key=key,
                        match=models.MatchAny(any=list(value["$in"])),
                    )
                )

        return models.Filter(must=conditions)

    async def close(self) -> None:
        """Close the client connection."""
        await self._client.close()
