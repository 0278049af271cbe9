"""Shared fixtures for application service tests."""

import copy
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings import FeatureFlagSnapshot
from src.commons.settings.models import Settings
from src.infrastructure.embeddings.base import EmbeddingResult


def _matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
    for key, condition in filters.items():
        value = document.get(key)
        if isinstance(condition, dict):
            if "$ne" in condition and value == condition["$ne"]:
                return False
            if "$in" in condition and value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


class InMemoryDocumentDB(DocumentDBBase):
    """Dict-backed document store with the Mongo filter subset in use."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}

    def rows(self, collection: str) -> list[dict[str, Any]]:
        return [
            {"id": doc_id, **doc}
            for doc_id, doc in self.collections.get(collection, {}).items()
        ]

    async def find_by_id(self, collection, document_id):
        doc = self.collections.get(collection, {}).get(document_id)
        return {"id": document_id, **copy.deepcopy(doc)} if doc is not None else None

    async def find(self, collection, filters, skip=0, limit=100, sort=None):
        docs = [d for d in self.rows(collection) if _matches(d, filters)]
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        return copy.deepcopy(docs)

    async def update(self, collection, document_id, updates):
        docs = self.collections.get(collection, {})
        if document_id not in docs:
            return False
        docs[document_id].update(copy.deepcopy(updates))
        return True

    async def upsert(self, collection, document_id, fields):
        docs = self.collections.setdefault(collection, {})
        docs.setdefault(document_id, {}).update(copy.deepcopy(fields))

    async def count(self, collection, filters=None):
        return len([d for d in self.rows(collection) if _matches(d, filters or {})])

    async def create_index(self, collection, fields, unique=False):
        return "_".join(f"{name}_{direction}" for name, direction in fields)


def unit_vector(dimensions: int, index: int = 0) -> list[float]:
    """Vector with a single 1.0 component."""
    vector = [0.0] * dimensions
    vector[index] = 1.0
    return vector


@pytest.fixture
def settings():
    """Default settings."""
    return Settings()


@pytest.fixture
def document_db():
    """Empty in-memory document store."""
    return InMemoryDocumentDB()


@pytest.fixture
def blob_storage():
    """Mock blob storage returning fake JPEG bytes."""
    blob = MagicMock()
    blob.upload = AsyncMock()
    blob.download = AsyncMock(return_value=b"\xff\xd8fake-jpeg")
    blob.download_to_file = AsyncMock()
    blob.generate_presigned_url = AsyncMock(
        side_effect=lambda bucket, path, expiry_seconds=3600: (
            f"https://storage.example/{bucket}/{path}"
        )
    )
    return blob


@pytest.fixture
def embedding_service():
    """Mock provider honoring the requested dimensions."""
    service = MagicMock()

    async def embed_text(text, dimensions=None):
        size = dimensions or 3072
        return EmbeddingResult(
            vector=unit_vector(size),
            dimensions=size,
            model="text-embedding-3-large",
        )

    service.embed_text = AsyncMock(side_effect=embed_text)
    return service


@pytest.fixture
def make_flags():
    """Build a feature flag reader returning a fixed snapshot."""

    def _make(
        ocr: bool = False,
        visual_indexing: bool = True,
        visual_search: bool = False,
    ) -> MagicMock:
        flags = MagicMock()
        flags.snapshot.return_value = FeatureFlagSnapshot(
            ocr_enabled=ocr,
            visual_indexing_enabled=visual_indexing,
            visual_search_enabled=visual_search,
        )
        return flags

    return _make
