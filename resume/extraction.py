"""Best-effort contact details from an uploaded resume."""
from __future__ import annotations

import io
import logging
import re
from typing import Callable, List, Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from config.settings import settings
from interview.candidate import normalize_phone
from interview.models import CandidateInfo

logger = logging.getLogger(__name__)

OcrFn = Callable[[bytes], str]

EMAIL_RE = re.compile(r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+)", re.IGNORECASE)
PHONE_RE = re.compile(r"(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})")
MAX_NAME_LENGTH = 50


class ExtractionFailure(ValueError):
    """The document could not be read; the user should pick another file."""


def extract_text(data: bytes) -> str:
    """Concatenate the text layer of every page."""

    try:
        reader = PdfReader(io.BytesIO(data))
        pages: List[str] = []
        for page in reader.pages:
            text = page.extract_text() or ""
            if text.strip():
                pages.append(text)
    except (PdfReadError, ValueError, OSError) as exc:
        raise ExtractionFailure("Failed to parse the PDF. Please try another file.") from exc
    return "\n".join(pages).strip()


def parse_contact_details(text: str) -> CandidateInfo:
    email_match = EMAIL_RE.search(text)
    phone_match = PHONE_RE.search(text)
    email = email_match.group(1).strip() if email_match else ""
    phone = normalize_phone(phone_match.group(1)) if phone_match else ""
    return CandidateInfo(name=guess_name(text), email=email, phone=phone)


def guess_name(text: str) -> str:
    """First short line that is neither an email nor a phone number, else blank."""

    for line in (raw.strip() for raw in re.split(r"\r?\n", text)):
        if not line:
            continue
        if EMAIL_RE.search(line) or PHONE_RE.search(line):
            continue
        if len(line) < MAX_NAME_LENGTH:
            return line
    return ""


def extract_candidate_info(data: bytes, *, ocr: Optional[OcrFn] = None) -> CandidateInfo:
    """Read a PDF resume and pull out name, email and phone.

    When the text layer yields almost nothing (scanned resumes) and ``ocr`` is
    given, its text is used instead.

    Raises:
        ExtractionFailure: when the bytes are not a readable PDF.
    """

    if not data:
        raise ExtractionFailure("Please select a valid PDF file.")
    text = extract_text(data)
    if len(text) < settings.OCR_MIN_CHARS and ocr is not None:
        logger.info("Text layer too small (%d chars), falling back to OCR", len(text))
        try:
            text = (ocr(data) or "").strip()
        except Exception as exc:  # noqa: BLE001
            raise ExtractionFailure("Failed to read the scanned resume. Please try another file.") from exc
    return parse_contact_details(text)


__all__ = [
    "ExtractionFailure",
    "OcrFn",
    "extract_candidate_info",
    "extract_text",
    "guess_name",
    "parse_contact_details",
]
