"""Text extraction and filename-based classification for uploaded documents."""

from __future__ import annotations

from venturescope.models.enums import DocumentClassification

_TEXT_TYPES = {"text/plain", "text/csv"}
_WORD_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}
_EXCEL_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}
_POWERPOINT_TYPES = {
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-powerpoint",
}

# Checked in order; first match wins.
_KEYWORD_RULES: tuple[tuple[DocumentClassification, tuple[str, ...]], ...] = (
    (DocumentClassification.PITCH_DECK, ("pitch", "deck", "presentation", "investor")),
    (DocumentClassification.FINANCIALS, ("financial", "revenue", "p&l", "profit", "budget", "forecast")),
    (DocumentClassification.CAP_TABLE, ("cap", "equity", "shares", "ownership")),
    (DocumentClassification.LEGAL, ("legal", "contract", "agreement", "term", "nda", "incorporation")),
    (DocumentClassification.PRODUCT_DEMO, ("demo", "product", "walkthrough")),
)
_CUSTOMER_KEYWORDS = ("customer", "reference", "testimonial", "case study")

EXTRACTION_VERSION = "1.0"


def extract_text(data: bytes, file_type: str, file_name: str) -> str:
    """Decode plain text formats; binary formats get a placeholder naming the file."""
    if file_type in _TEXT_TYPES:
        return data.decode("utf-8", errors="replace")
    if file_type == "application/pdf":
        return f"[PDF document: {file_name}]"
    if file_type in _WORD_TYPES:
        return f"[Word document: {file_name}]"
    if file_type in _EXCEL_TYPES:
        return f"[Excel document: {file_name}]"
    if file_type in _POWERPOINT_TYPES:
        return f"[PowerPoint document: {file_name}]"
    if file_type.startswith("image/"):
        return f"[Image: {file_name}]"
    if file_type.startswith("video/"):
        return f"[Video: {file_name}]"
    return ""


def classify_document(file_name: str, file_type: str) -> DocumentClassification:
    lower_name = file_name.lower()
    for classification, keywords in _KEYWORD_RULES:
        if any(keyword in lower_name for keyword in keywords):
            return classification
    if file_type.startswith("video/"):
        if "founder" in lower_name or "intro" in lower_name:
            return DocumentClassification.FOUNDER_VIDEO
        return DocumentClassification.PRODUCT_DEMO
    if any(keyword in lower_name for keyword in _CUSTOMER_KEYWORDS):
        return DocumentClassification.CUSTOMER_REFERENCE
    return DocumentClassification.OTHER
