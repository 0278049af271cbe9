"""Abstract base class for OCR services."""

from abc import ABC, abstractmethod

from src.domain.models import OCRResult


class OCRServiceBase(ABC):
    """Recognizes on-screen text in a single image.

    Implementations must hold no per-call mutable state so that calls for
    different frames can run concurrently.
    """

    @abstractmethod
    async def recognize(self, image: bytes) -> OCRResult:
        """Extract text from an encoded image.

        Args:
            image: Encoded image bytes (JPEG or PNG).

        Returns:
            Recognized text, mean word confidence (0-100) and word blocks.
        """
