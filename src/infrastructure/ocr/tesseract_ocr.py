"""Tesseract implementation of OCR service."""

import asyncio
import io
from typing import Any

import pytesseract
from PIL import Image
from pytesseract import Output

from src.domain.models import OCRBlock, OCRResult
from src.infrastructure.ocr.base import OCRServiceBase

# Tesseract layout level of individual words in image_to_data output
_WORD_LEVEL = 5


class TesseractOCRService(OCRServiceBase):
    """OCR through the Tesseract engine via pytesseract.

    Requires the tesseract binary. Recognition is CPU bound and blocking,
    so it runs in the default executor.
    """

    def __init__(
        self,
        language: str = "eng",
        min_confidence: float = 60.0,
        tesseract_cmd: str | None = None,
    ) -> None:
        """Initialize the Tesseract OCR service.

        Args:
            language: Tesseract language code(s), e.g. "eng" or "eng+spa".
            min_confidence: Words below this confidence (0-100) are dropped.
            tesseract_cmd: Optional path to the tesseract binary.
        """
        self._language = language
        self._min_confidence = min_confidence
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    async def recognize(self, image: bytes) -> OCRResult:
        """Extract text from an encoded image."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._recognize_sync, image)

    def _recognize_sync(self, image: bytes) -> OCRResult:
        with Image.open(io.BytesIO(image)) as img:
            data = pytesseract.image_to_data(
                img.convert("RGB"),
                lang=self._language,
                output_type=Output.DICT,
            )
        return self.parse_data(data)

    def parse_data(self, data: dict[str, list[Any]]) -> OCRResult:
        """Turn ``image_to_data`` output into an OCRResult.

        Words are grouped back into lines using Tesseract's block, paragraph
        and line numbers.

        Args:
            data: Dict returned by ``pytesseract.image_to_data``.

        Returns:
            The parsed result. Empty text when no word passes the threshold.
        """
        blocks: list[OCRBlock] = []
        lines: dict[tuple[int, int, int], list[str]] = {}

        for i, raw_text in enumerate(data.get("text", [])):
            text = (raw_text or "").strip()
            if not text or int(data["level"][i] or 0) != _WORD_LEVEL:
                continue

            try:
                confidence = float(data["conf"][i])
            except (TypeError, ValueError):
                continue
            if confidence < self._min_confidence:
                continue

            blocks.append(
                OCRBlock(
                    text=text,
                    confidence=confidence,
                    bbox=(
                        int(data["left"][i] or 0),
                        int(data["top"][i] or 0),
                        int(data["width"][i] or 0),
                        int(data["height"][i] or 0),
                    ),
                )
            )
            line_key = (
                int(data["block_num"][i] or 0),
                int(data["par_num"][i] or 0),
                int(data["line_num"][i] or 0),
            )
            lines.setdefault(line_key, []).append(text)

        if not blocks:
            return OCRResult(text="", confidence=None, blocks=[])

        return OCRResult(
            text="\n".join(" ".join(words) for words in lines.values()),
            confidence=round(sum(b.confidence for b in blocks) / len(blocks), 2),
            blocks=blocks,
        )
