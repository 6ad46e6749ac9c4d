"""OCR for scanned resumes whose PDF carries no text layer."""
from __future__ import annotations

import io
import logging
from typing import List, Optional

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from config.settings import settings

logger = logging.getLogger(__name__)


def ocr_pdf(data: bytes, *, dpi: Optional[int] = None, lang: Optional[str] = None) -> str:
    """Render every page to an image and run Tesseract over it.

    Raises whatever PyMuPDF or pytesseract raise; the caller turns that into
    an extraction failure.
    """

    resolution = dpi or settings.OCR_DPI
    language = lang or settings.OCR_LANG
    doc = fitz.open(stream=data, filetype="pdf")
    pages: List[str] = []
    try:
        for number, page in enumerate(doc, start=1):
            pixmap = page.get_pixmap(dpi=resolution)
            image = Image.open(io.BytesIO(pixmap.tobytes("png")))
            text = pytesseract.image_to_string(image, lang=language).strip()
            logger.debug("OCR page %d: %d chars", number, len(text))
            if text:
                pages.append(text)
    finally:
        doc.close()
    return "\n".join(pages)


__all__ = ["ocr_pdf"]
