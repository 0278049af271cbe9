"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any


class DocumentDBBase(ABC):
    """Row persistence for recordings, frames, summaries and jobs.

    Documents are plain dicts. The domain ``id`` field is the primary key;
    implementations map it to their native key and restore it on reads.
    """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection name.
            document_id: Document ID.

        Returns:
            The document or None if not found.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return. 0 means no limit.
            sort: Sort order as (field, direction) pairs.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Set fields on an existing document.

        Args:
            collection: Collection name.
            document_id: Document ID.
            updates: Fields to set.

        Returns:
            True if a document matched.
        """

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        """Set fields on a document, creating it if missing.

        Fields not named in ``fields`` keep their stored values. Concurrent
        upserts of the same document are last-writer-wins.

        Args:
            collection: Collection name.
            document_id: Document ID.
            fields: Fields to set.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: List of (field_name, direction) tuples.
            unique: Whether the index enforces uniqueness.

        Returns:
            Index name.
        """
