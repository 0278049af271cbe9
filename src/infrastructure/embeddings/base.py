"""Abstract base class for embedding services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmbeddingResult:
    """Result from embedding generation."""

    vector: list[float]
    dimensions: int
    model: str
    tokens_used: int | None = None


class EmbeddingServiceBase(ABC):
    """Abstract base class for text embedding providers.

    Providers must be able to produce vectors at more than one
    dimensionality from the same model, either natively or through a
    ``dimensions`` request parameter.
    """

    @abstractmethod
    async def embed_text(
        self,
        text: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.
            dimensions: Requested vector size. Defaults to the model's native size.

        Returns:
            Embedding result with vector and metadata.
        """

    @abstractmethod
    async def embed_texts(
        self,
        texts: list[str],
        dimensions: int | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts (batched).

        Args:
            texts: List of texts to embed.
            dimensions: Requested vector size. Defaults to the model's native size.

        Returns:
            List of embedding results in same order as input.
        """

    @property
    @abstractmethod
    def native_dimensions(self) -> int:
        """Vector size the model produces without truncation."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Identifier of the embedding model."""
