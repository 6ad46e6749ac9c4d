from .extraction import ExtractionFailure, extract_candidate_info, extract_text, guess_name, parse_contact_details
from .ocr import ocr_pdf

__all__ = ["ExtractionFailure", "extract_candidate_info", "extract_text", "guess_name", "ocr_pdf", "parse_contact_details"]
