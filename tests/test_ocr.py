"""Tests for the OCR collaborator and the template-free summary."""

import io
from unittest.mock import patch

import pytesseract
import pytest
from PIL import Image

from purchase_ocr.ocr.receipt_summary import guess_total, summarize
from purchase_ocr.ocr.tesseract_engine import OCRError, TesseractEngine
from purchase_ocr.utils.config import OCRConfig


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (120, 40), "white").save(buf, format="PNG")
    return buf.getvalue()


class TestTesseractEngine:
    """Tests for TesseractEngine with pytesseract mocked out."""

    @patch("purchase_ocr.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_image_to_text(self, mock_ocr) -> None:
        mock_ocr.return_value = "Acme Store\nTotal 10.00\n"
        engine = TesseractEngine(default_lang="eng", psm=6)

        assert engine.image_to_text(_png_bytes()) == "Acme Store\nTotal 10.00\n"
        _, kwargs = mock_ocr.call_args
        assert kwargs["lang"] == "eng"
        assert kwargs["config"] == "--psm 6"

    @patch("purchase_ocr.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_language_override(self, mock_ocr) -> None:
        mock_ocr.return_value = ""
        TesseractEngine().image_to_text(_png_bytes(), lang="hin")
        assert mock_ocr.call_args.kwargs["lang"] == "hin"

    def test_not_an_image(self) -> None:
        with pytest.raises(OCRError, match="cannot decode image"):
            TesseractEngine().image_to_text(b"plain text")

    @patch("purchase_ocr.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_tesseract_failure(self, mock_ocr) -> None:
        mock_ocr.side_effect = pytesseract.TesseractError(1, "boom")
        with pytest.raises(OCRError):
            TesseractEngine().image_to_text(_png_bytes())

    @patch("purchase_ocr.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_tesseract_missing(self, mock_ocr) -> None:
        mock_ocr.side_effect = pytesseract.TesseractNotFoundError()
        with pytest.raises(OCRError):
            TesseractEngine().image_to_text(_png_bytes())

    def test_from_config(self) -> None:
        engine = TesseractEngine.from_config(OCRConfig(default_lang="deu", psm=4))
        assert engine.default_lang == "deu"
        assert engine.psm == 4


class TestReceiptSummary:
    """Tests for the template-free summary heuristic."""

    def test_vendor_is_first_non_blank_line(self) -> None:
        record = summarize("\n   \n  Acme Store  \nTotal: 10")
        assert record.vendor_name == "Acme Store"

    def test_labelled_total(self) -> None:
        assert guess_total("Items 3\nGrand Total: 1,234.50\nCash 2000") == 1234.5

    def test_rupee_symbol_label(self) -> None:
        assert guess_total("Paid ₹ 450") == 450.0

    def test_falls_back_to_last_number(self) -> None:
        assert guess_total("Bread 40\nMilk 25.50") == 25.5

    def test_no_numbers(self) -> None:
        assert guess_total("thank you") is None

    def test_zero_total_is_none(self) -> None:
        assert guess_total("Total: 0") is None

    def test_record_shape(self) -> None:
        record = summarize("")
        assert record.to_dict() == {
            "raw": "",
            "vendorName": "",
            "purchaseDate": "",
            "subtotal": None,
            "total": None,
            "items": [],
        }
