"""Tesseract OCR collaborator for uploaded receipt images.

Turns an image buffer into raw text; everything downstream works on text.
"""

import io

import pytesseract
from PIL import Image, UnidentifiedImageError

from purchase_ocr.utils.config import OCRConfig
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class OCRError(Exception):
    """Raised when an image cannot be decoded or recognised."""


class TesseractEngine:
    """Wrapper around Tesseract OCR for receipt text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    @classmethod
    def from_config(cls, config: OCRConfig) -> "TesseractEngine":
        return cls(config.tesseract_cmd, config.default_lang, config.psm)

    def image_to_text(self, data: bytes, lang: str | None = None) -> str:
        """Recognise the text in an encoded image.

        Args:
            data: Encoded image bytes (PNG, JPEG, TIFF, ...).
            lang: OCR language code. Defaults to the engine default.

        Returns:
            Recognised text, possibly empty.

        Raises:
            OCRError: If the bytes are not an image or Tesseract fails.
        """
        lang = lang or self.default_lang
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise OCRError(f"cannot decode image: {exc}") from exc

        try:
            text = pytesseract.image_to_string(
                image, lang=lang, config=f"--psm {self.psm}"
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            logger.error("Tesseract failed: %s", exc)
            raise OCRError(str(exc)) from exc

        logger.info("OCR recognised %d characters", len(text))
        return text or ""
