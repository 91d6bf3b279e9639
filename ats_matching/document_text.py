"""
Document Text Extraction

Turns an uploaded CV into the plain text the analysis consumes.
"""

import base64
import binascii
import io
import logging

import pdfplumber

from .errors import DocumentExtractionError

logger = logging.getLogger(__name__)


def decode_base64_pdf(content: str) -> bytes:
    """Decode base64 PDF content, tolerating a data-URL or `PDF_BASE64:` prefix."""
    if not content:
        raise DocumentExtractionError("Please select a valid PDF file.")
    if "," in content and content.lstrip().startswith("data:"):
        content = content.split(",", 1)[1]
    if content.startswith("PDF_BASE64:"):
        content = content[len("PDF_BASE64:"):]
    try:
        return base64.b64decode(content, validate=False)
    except (binascii.Error, ValueError) as e:
        raise DocumentExtractionError("Please select a valid PDF file.") from e


def extract_text_from_pdf_bytes(data: bytes) -> str:
    """
    Extract the text of every page, one page per block.

    Raises:
        DocumentExtractionError: not a PDF, unreadable, or no text layer
    """
    if not data or not data.lstrip().startswith(b"%PDF"):
        raise DocumentExtractionError("Please select a valid PDF file.")

    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.warning(f"PDF text extraction failed: {e}")
        raise DocumentExtractionError("Could not read the PDF. Please try a different file.") from e

    text = "\n".join(pages).strip()
    if not text:
        raise DocumentExtractionError(
            "No text could be found in the PDF. Scanned documents are not supported."
        )
    return text
