"""Vector database abstractions and implementations."""

from src.commons.infrastructure.vectordb.base import (
    HierarchicalSearchRow,
    SearchResult,
    VectorDBBase,
    VectorPoint,
)
from src.commons.infrastructure.vectordb.qdrant_provider import QdrantVectorDB

__all__ = [
    # Base classes
    "HierarchicalSearchRow",
    "SearchResult",
    "VectorDBBase",
    "VectorPoint",
    # Implementations
    "QdrantVectorDB",
]
