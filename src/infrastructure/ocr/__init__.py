"""OCR service implementations."""

from src.infrastructure.ocr.base import OCRServiceBase
from src.infrastructure.ocr.tesseract_ocr import TesseractOCRService

__all__ = [
    "OCRServiceBase",
    "TesseractOCRService",
]
