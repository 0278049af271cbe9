"""Unit tests for the Tesseract OCR provider."""

import io
from unittest.mock import patch

import pytest
from PIL import Image

from src.infrastructure.ocr import TesseractOCRService


def _data(*words):
    """Build an ``image_to_data`` style dict from (text, conf, line) tuples."""
    data = {
        key: []
        for key in (
            "level",
            "block_num",
            "par_num",
            "line_num",
            "left",
            "top",
            "width",
            "height",
            "conf",
            "text",
        )
    }
    for i, (text, conf, line) in enumerate(words):
        data["level"].append(5)
        data["block_num"].append(1)
        data["par_num"].append(1)
        data["line_num"].append(line)
        data["left"].append(10 * i)
        data["top"].append(20 * line)
        data["width"].append(8)
        data["height"].append(12)
        data["conf"].append(conf)
        data["text"].append(text)
    return data


class TestParseData:
    """Tests for turning Tesseract output into OCRResult."""

    @pytest.fixture
    def service(self):
        return TesseractOCRService(min_confidence=60.0)

    def test_groups_words_into_lines(self, service):
        result = service.parse_data(
            _data(("def", 95, 1), ("main():", 91, 1), ("return", 88, 2))
        )

        assert result.text == "def main():\nreturn"
        assert result.confidence == pytest.approx(91.33)
        assert [b.text for b in result.blocks] == ["def", "main():", "return"]
        assert result.blocks[1].bbox == (10, 20, 8, 12)

    def test_drops_low_confidence_and_blank_words(self, service):
        result = service.parse_data(
            _data(("clear", 90, 1), ("~~", 12, 1), ("  ", 95, 1), ("x", "-1", 1))
        )

        assert result.text == "clear"
        assert len(result.blocks) == 1

    def test_skips_non_word_levels(self, service):
        data = _data(("header", 90, 1))
        data["level"][0] = 4

        assert service.parse_data(data).text == ""

    def test_empty_result(self, service):
        result = service.parse_data(_data())

        assert result.text == ""
        assert result.confidence is None
        assert result.blocks == []

    def test_unparseable_confidence(self, service):
        result = service.parse_data(_data(("word", None, 1)))
        assert result.blocks == []


class TestRecognize:
    """Tests for the async recognize entry point."""

    async def test_runs_tesseract_on_decoded_image(self):
        buffer = io.BytesIO()
        Image.new("L", (32, 16), color=255).save(buffer, format="PNG")
        service = TesseractOCRService(language="eng+spa")

        with patch(
            "src.infrastructure.ocr.tesseract_ocr.pytesseract.image_to_data",
            return_value=_data(("hola", 80, 1)),
        ) as image_to_data:
            result = await service.recognize(buffer.getvalue())

        assert result.text == "hola"
        assert image_to_data.call_args.kwargs["lang"] == "eng+spa"
        assert image_to_data.call_args.args[0].mode == "RGB"

    async def test_invalid_image_raises(self):
        service = TesseractOCRService()

        with pytest.raises(OSError):
            await service.recognize(b"not an image")
