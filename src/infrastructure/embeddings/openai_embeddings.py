"""OpenAI implementation of text embedding service."""

from typing import Any, ClassVar

from openai import AsyncOpenAI

from src.infrastructure.embeddings.base import EmbeddingResult, EmbeddingServiceBase


class OpenAIEmbeddingService(EmbeddingServiceBase):
    """OpenAI implementation of text embedding service.

    The text-embedding-3 models accept a ``dimensions`` parameter, so one
    model serves both the 1536 and the 3072 resolution.
    """

    _MODEL_DIMENSIONS: ClassVar[dict[str, int]] = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    # ada-002 rejects the dimensions parameter
    _FIXED_DIMENSION_MODELS: ClassVar[set[str]] = {"text-embedding-ada-002"}

    _MAX_BATCH_SIZE: ClassVar[int] = 2048

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-large",
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key.
            model: Embedding model to use.
            base_url: Optional custom API endpoint (for Azure, etc.).
            client: Pre-built client, mainly for tests.
        """
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
        )
        self._model = model
        self._native_dimensions = self._MODEL_DIMENSIONS.get(model, 1536)

    def _request_kwargs(self, dimensions: int | None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"model": self._model}
        if (
            dimensions is not None
            and dimensions != self._native_dimensions
            and self._model not in self._FIXED_DIMENSION_MODELS
        ):
            kwargs["dimensions"] = dimensions
        return kwargs

    async def embed_text(
        self,
        text: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text."""
        response = await self._client.embeddings.create(
            input=text,
            **self._request_kwargs(dimensions),
        )

        embedding = response.data[0].embedding
        return EmbeddingResult(
            vector=embedding,
            dimensions=len(embedding),
            model=self._model,
            tokens_used=response.usage.total_tokens if response.usage else None,
        )

    async def embed_texts(
        self,
        texts: list[str],
        dimensions: int | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts (batched)."""
        if not texts:
            return []

        kwargs = self._request_kwargs(dimensions)
        results: list[EmbeddingResult] = []
        for i in range(0, len(texts), self._MAX_BATCH_SIZE):
            batch = texts[i : i + self._MAX_BATCH_SIZE]
            response = await self._client.embeddings.create(input=batch, **kwargs)

            tokens_per_item = None
            if response.usage:
                tokens_per_item = response.usage.total_tokens // len(batch)

            results.extend(
                EmbeddingResult(
                    vector=data.embedding,
                    dimensions=len(data.embedding),
                    model=self._model,
                    tokens_used=tokens_per_item,
                )
                for data in sorted(response.data, key=lambda d: d.index)
            )

        return results

    @property
    def native_dimensions(self) -> int:
        """Vector size the model produces without truncation."""
        return self._native_dimensions

    @property
    def model(self) -> str:
        """Identifier of the embedding model."""
        return self._model
