"""Query and description embedding at the two supported resolutions."""

import asyncio

from src.commons.telemetry import get_logger
from src.domain.exceptions import EmbeddingGenerationError, ValidationError
from src.domain.models import DualEmbedding, EmbeddingResolution
from src.infrastructure.embeddings.base import EmbeddingServiceBase


class EmbeddingGenerator:
    """Produces 1536 and 3072 dimension vectors from one embedding model.

    The generator never retries. Provider failures and vectors of the wrong
    length both surface as ``EmbeddingGenerationError``.
    """

    def __init__(self, embedding_service: EmbeddingServiceBase) -> None:
        """Initialize the generator.

        Args:
            embedding_service: Provider able to produce both resolutions.
        """
        self._embedding_service = embedding_service
        self._logger = get_logger(__name__)

    async def embed(self, text: str, resolution: int) -> list[float]:
        """Embed text at the requested resolution.

        Args:
            text: Input text, must be non-empty after stripping.
            resolution: 1536 or 3072.

        Returns:
            Vector with exactly ``resolution`` components.

        Raises:
            ValidationError: If the text is blank or the resolution unsupported.
            EmbeddingGenerationError: If the provider fails or returns a
                vector of the wrong length.
        """
        self._validate_text(text)
        resolution = self._validate_resolution(resolution)
        return await self._embed(text, resolution)

    async def embed_dual(self, text: str) -> DualEmbedding:
        """Embed text at both resolutions concurrently.

        Either both vectors are returned or the call fails as a whole.

        Args:
            text: Input text, must be non-empty after stripping.

        Returns:
            The low and high resolution pair.

        Raises:
            ValidationError: If the text is blank.
            EmbeddingGenerationError: If either vector cannot be produced.
        """
        self._validate_text(text)

        results = await asyncio.gather(
            self._embed(text, EmbeddingResolution.LOW),
            self._embed(text, EmbeddingResolution.HIGH),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                reason = (
                    result.reason
                    if isinstance(result, EmbeddingGenerationError)
                    else str(result)
                )
                raise EmbeddingGenerationError(None, reason) from result

        vector_low, vector_high = results
        return DualEmbedding(vector_low=vector_low, vector_high=vector_high)

    async def _embed(self, text: str, resolution: EmbeddingResolution) -> list[float]:
        try:
            result = await self._embedding_service.embed_text(
                text,
                dimensions=int(resolution),
            )
        except Exception as e:
            self._logger.warning(
                "Embedding provider call failed",
                extra={"resolution": int(resolution), "error": str(e)},
            )
            raise EmbeddingGenerationError(int(resolution), str(e)) from e

        if len(result.vector) != resolution:
            raise EmbeddingGenerationError(
                int(resolution),
                f"expected {int(resolution)} dimensions, got {len(result.vector)}",
            )

        return result.vector

    @staticmethod
    def _validate_text(text: str) -> None:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("text", "must be a non-empty string")

    @staticmethod
    def _validate_resolution(resolution: int) -> EmbeddingResolution:
        try:
            return EmbeddingResolution(resolution)
        except ValueError:
            allowed = ", ".join(str(int(r)) for r in EmbeddingResolution)
            raise ValidationError(
                "resolution", f"must be one of {allowed}, got {resolution}"
            ) from None
