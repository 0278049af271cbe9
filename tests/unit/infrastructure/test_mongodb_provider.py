"""Unit tests for MongoDB document database provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.commons.infrastructure.documentdb.mongodb_provider import MongoDBDocumentDB


class TestMongoDBDocumentDB:
    """Tests for MongoDBDocumentDB provider.

    These tests verify the ID mapping between the domain 'id' and
    MongoDB's '_id' field, and the upsert semantics frame rows rely on.
    """

    @pytest.fixture
    def mock_motor_client(self):
        """Create a mock Motor client."""
        with patch(
            "src.commons.infrastructure.documentdb.mongodb_provider.AsyncIOMotorClient"
        ) as mock_client_class:
            mock_client = MagicMock()
            mock_db = MagicMock()
            mock_collection = MagicMock()

            mock_client.__getitem__ = MagicMock(return_value=mock_db)
            mock_db.__getitem__ = MagicMock(return_value=mock_collection)
            mock_client_class.return_value = mock_client

            yield {
                "client_class": mock_client_class,
                "client": mock_client,
                "db": mock_db,
                "collection": mock_collection,
            }

    @pytest.fixture
    def mongodb_provider(self, mock_motor_client):
        """Create MongoDB provider with mocked client."""
        return MongoDBDocumentDB(
            connection_string="mongodb://localhost:27017",
            database_name="test_db",
        )

    @staticmethod
    def _cursor(docs):
        async def iterate():
            for doc in docs:
                yield doc

        cursor = MagicMock()
        cursor.sort = MagicMock(return_value=cursor)
        cursor.skip = MagicMock(return_value=cursor)
        cursor.limit = MagicMock(return_value=cursor)
        cursor.__aiter__ = lambda self: iterate()
        return cursor

    def test_connects_to_database(self, mongodb_provider, mock_motor_client):
        mock_motor_client["client_class"].assert_called_once_with(
            "mongodb://localhost:27017"
        )
        mock_motor_client["client"].__getitem__.assert_called_with("test_db")

    # =========================================================================
    # Find Tests
    # =========================================================================

    async def test_find_by_id_maps_id(self, mongodb_provider, mock_motor_client):
        """Test that find_by_id restores the 'id' field."""
        collection = mock_motor_client["collection"]
        collection.find_one = AsyncMock(
            return_value={"_id": "rec-1:3", "frame_number": 3}
        )

        result = await mongodb_provider.find_by_id("video_frames", "rec-1:3")

        collection.find_one.assert_awaited_once_with({"_id": "rec-1:3"})
        assert result == {"id": "rec-1:3", "frame_number": 3}

    async def test_find_by_id_not_found(self, mongodb_provider, mock_motor_client):
        mock_motor_client["collection"].find_one = AsyncMock(return_value=None)

        assert await mongodb_provider.find_by_id("video_frames", "missing") is None

    async def test_find_returns_id_field(self, mongodb_provider, mock_motor_client):
        """Test that find returns documents with 'id' field."""
        collection = mock_motor_client["collection"]
        cursor = self._cursor(
            [
                {"_id": "rec-1:1", "frame_number": 1},
                {"_id": "rec-1:2", "frame_number": 2},
            ]
        )
        collection.find = MagicMock(return_value=cursor)

        results = await mongodb_provider.find(
            "video_frames",
            {"recording_id": "rec-1"},
            limit=0,
            sort=[("frame_number", 1)],
        )

        assert [doc["id"] for doc in results] == ["rec-1:1", "rec-1:2"]
        assert all("_id" not in doc for doc in results)
        cursor.sort.assert_called_once_with([("frame_number", 1)])
        cursor.limit.assert_called_once_with(0)

    async def test_find_without_sort(self, mongodb_provider, mock_motor_client):
        cursor = self._cursor([])
        mock_motor_client["collection"].find = MagicMock(return_value=cursor)

        assert await mongodb_provider.find("jobs", {}) == []
        cursor.sort.assert_not_called()
        cursor.skip.assert_called_once_with(0)

    # =========================================================================
    # Write Tests
    # =========================================================================

    async def test_update_strips_id(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))

        updated = await mongodb_provider.update(
            "video_frames", "rec-1:1", {"id": "ignored", "ocr_text": "hello"}
        )

        assert updated is True
        collection.update_one.assert_awaited_once_with(
            {"_id": "rec-1:1"}, {"$set": {"ocr_text": "hello"}}
        )

    async def test_update_not_found(self, mongodb_provider, mock_motor_client):
        mock_motor_client["collection"].update_one = AsyncMock(
            return_value=MagicMock(matched_count=0)
        )

        assert await mongodb_provider.update("video_frames", "x", {"a": 1}) is False

    async def test_upsert_sets_fields_with_upsert(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that upsert merges fields and creates missing rows."""
        collection = mock_motor_client["collection"]
        collection.update_one = AsyncMock()

        await mongodb_provider.upsert(
            "video_frames",
            "rec-1:1",
            {"id": "rec-1:1", "recording_id": "rec-1", "frame_number": 1},
        )

        collection.update_one.assert_awaited_once_with(
            {"_id": "rec-1:1"},
            {"$set": {"recording_id": "rec-1", "frame_number": 1}},
            upsert=True,
        )

    # =========================================================================
    # Count and Index Tests
    # =========================================================================

    async def test_count_with_filters(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.count_documents = AsyncMock(return_value=12)

        assert await mongodb_provider.count("video_frames", {"recording_id": "r"}) == 12
        collection.count_documents.assert_awaited_once_with({"recording_id": "r"})

    async def test_count_without_filters(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.estimated_document_count = AsyncMock(return_value=40)

        assert await mongodb_provider.count("video_frames") == 40

    async def test_create_unique_index(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        index_name = "recording_id_1_frame_number_1"
        collection.create_index = AsyncMock(return_value=index_name)

        name = await mongodb_provider.create_index(
            "video_frames", [("recording_id", 1), ("frame_number", 1)], unique=True
        )

        assert name == index_name
        collection.create_index.assert_awaited_once_with(
            [("recording_id", 1), ("frame_number", 1)], unique=True
        )

    async def test_close(self, mongodb_provider, mock_motor_client):
        await mongodb_provider.close()
        mock_motor_client["client"].close.assert_called_once()
