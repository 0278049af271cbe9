"""Unit tests for EmbeddingGenerator."""

from unittest.mock import AsyncMock

import pytest

from src.application.services.embedding import EmbeddingGenerator
from src.domain.exceptions import EmbeddingGenerationError, ValidationError
from src.infrastructure.embeddings.base import EmbeddingResult


@pytest.fixture
def generator(embedding_service):
    return EmbeddingGenerator(embedding_service)


class TestEmbed:
    """Tests for single-resolution embedding."""

    async def test_returns_vector_of_requested_length(self, generator):
        vector = await generator.embed("login page", 1536)
        assert len(vector) == 1536

    async def test_passes_dimensions_to_provider(self, generator, embedding_service):
        await generator.embed("login page", 3072)
        embedding_service.embed_text.assert_awaited_once_with(
            "login page", dimensions=3072
        )

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected(self, generator, embedding_service, text):
        with pytest.raises(ValidationError) as exc_info:
            await generator.embed(text, 1536)
        assert exc_info.value.field == "text"
        embedding_service.embed_text.assert_not_awaited()

    @pytest.mark.parametrize("resolution", [0, 768, 1024, 4096])
    async def test_unsupported_resolution_rejected(self, generator, resolution):
        with pytest.raises(ValidationError) as exc_info:
            await generator.embed("query", resolution)
        assert exc_info.value.field == "resolution"

    async def test_wrong_vector_length_raises(self, generator, embedding_service):
        embedding_service.embed_text = AsyncMock(
            return_value=EmbeddingResult(
                vector=[0.1] * 1535,
                dimensions=1535,
                model="text-embedding-3-large",
            )
        )

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            await generator.embed("query", 1536)

        assert exc_info.value.resolution == 1536
        assert "1535" in str(exc_info.value)

    async def test_provider_error_wrapped_without_retry(
        self, generator, embedding_service
    ):
        embedding_service.embed_text = AsyncMock(
            side_effect=RuntimeError("rate limited")
        )

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            await generator.embed("query", 3072)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert embedding_service.embed_text.await_count == 1


class TestEmbedDual:
    """Tests for dual-resolution embedding."""

    async def test_returns_both_resolutions(self, generator):
        dual = await generator.embed_dual("deploy pipeline")
        assert len(dual.vector_low) == 1536
        assert len(dual.vector_high) == 3072

    async def test_requests_both_sizes(self, generator, embedding_service):
        await generator.embed_dual("deploy pipeline")
        requested = sorted(
            call.kwargs["dimensions"]
            for call in embedding_service.embed_text.await_args_list
        )
        assert requested == [1536, 3072]

    async def test_fails_atomically_when_high_resolution_fails(
        self, generator, embedding_service
    ):
        async def embed_text(text, dimensions=None):
            if dimensions == 3072:
                raise RuntimeError("provider down")
            return EmbeddingResult(
                vector=[0.0] * dimensions,
                dimensions=dimensions,
                model="m",
            )

        embedding_service.embed_text = AsyncMock(side_effect=embed_text)

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            await generator.embed_dual("deploy pipeline")

        assert str(exc_info.value).startswith("Failed to generate dual embeddings")
        assert "provider down" in str(exc_info.value)

    async def test_fails_when_low_resolution_has_wrong_length(
        self, generator, embedding_service
    ):
        async def embed_text(text, dimensions=None):
            size = 1000 if dimensions == 1536 else dimensions
            return EmbeddingResult(vector=[0.0] * size, dimensions=size, model="m")

        embedding_service.embed_text = AsyncMock(side_effect=embed_text)

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            await generator.embed_dual("deploy pipeline")

        assert exc_info.value.resolution is None

    async def test_blank_text_rejected(self, generator):
        with pytest.raises(ValidationError):
            await generator.embed_dual("  ")
