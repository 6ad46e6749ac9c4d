import fitz
import pytest

from resume import ExtractionFailure, extract_candidate_info, ocr_pdf


SCANNED_TEXT = "Ada Lovelace\nada@example.com\n(555) 123-4567\n"


def _pdf(text=None):
    doc = fitz.open()
    page = doc.new_page()
    if text:
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def test_blank_text_layer_goes_through_ocr(monkeypatch):
    seen = []

    def fake_tesseract(image, lang="eng"):
        seen.append((image.size, lang))
        return SCANNED_TEXT

    monkeypatch.setattr("pytesseract.image_to_string", fake_tesseract)
    info = extract_candidate_info(_pdf(), ocr=ocr_pdf)
    assert info.name == "Ada Lovelace"
    assert info.email == "ada@example.com"
    assert info.phone == "5551234567"
    assert len(seen) == 1
    assert seen[0][1] == "eng"


def test_text_layer_skips_ocr():
    def _unused(data):
        raise AssertionError("OCR should not run for a PDF with text")

    info = extract_candidate_info(_pdf("Contact: ada@example.com"), ocr=_unused)
    assert info.email == "ada@example.com"


def test_ocr_engine_failure_is_extraction_failure(monkeypatch):
    def broken(image, lang="eng"):
        raise RuntimeError("tesseract is not installed")

    monkeypatch.setattr("pytesseract.image_to_string", broken)
    with pytest.raises(ExtractionFailure):
        extract_candidate_info(_pdf(), ocr=ocr_pdf)


def test_ocr_pdf_joins_pages(monkeypatch):
    doc = fitz.open()
    for _ in range(3):
        doc.new_page()
    data = doc.tobytes()
    doc.close()
    replies = iter(["page one", "  ", "page three"])
    monkeypatch.setattr("pytesseract.image_to_string", lambda image, lang="eng": next(replies))
    assert ocr_pdf(data) == "page one\npage three"
