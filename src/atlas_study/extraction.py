"""Plain-text extraction from uploaded study documents.

PDFs go through ``pypdf``, DOCX through ``python-docx``; TXT and Markdown
are decoded as UTF-8. Every path trims the text, rejects empty output with
:class:`ExtractionError`, and caps the result at ``MAX_EXTRACTED_CHARS``.
"""

from __future__ import annotations

import io
import logging
from pathlib import PurePosixPath

import docx
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .errors import ExtractionError

logger = logging.getLogger(__name__)

MAX_EXTRACTED_CHARS = 50_000

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MAGIC = b"%PDF-"
SNIFF_BYTES = 1024

SUPPORTED_DOC_EXTENSIONS: dict[str, str] = {
    ".pdf": PDF_MIME,
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".docx": DOCX_MIME,
}


def _finalize(text: str | None, *, kind: str) -> str:
    """Trim, reject empty output, and apply the character cap."""
    if not text or not text.strip():
        raise ExtractionError(
            f"The {kind} appears to be empty or contains no extractable text."
        )
    text = text.strip()
    if len(text) > MAX_EXTRACTED_CHARS:
        logger.info(
            "Truncating extracted %s text from %d to %d chars",
            kind, len(text), MAX_EXTRACTED_CHARS,
        )
        text = text[:MAX_EXTRACTED_CHARS]
    return text


def extract_pdf_text(data: bytes) -> str:
    """Extract plain text from a PDF byte buffer.

    Args:
        data: Raw PDF bytes.

    Returns:
        Trimmed text, at most ``MAX_EXTRACTED_CHARS`` characters.

    Raises:
        ExtractionError: If the buffer is not a readable PDF or yields no text.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, OSError, KeyError, TypeError, AttributeError) as exc:
        raise ExtractionError(f"Could not read PDF: {exc}") from exc
    return _finalize("\n".join(pages), kind="PDF")


def extract_docx_text(data: bytes) -> str:
    """Extract paragraph text from a DOCX byte buffer."""
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as exc:
        raise ExtractionError(f"Could not read DOCX: {exc}") from exc
    paragraphs = [p.text for p in document.paragraphs]
    return _finalize("\n".join(paragraphs), kind="DOCX")


def extract_plain_text(data: bytes) -> str:
    """Decode a TXT / Markdown buffer as UTF-8 (undecodable bytes replaced)."""
    return _finalize(data.decode("utf-8", errors="replace"), kind="text file")


def detect_document_type(
    filename: str | None = None,
    mime_type: str | None = None,
    data: bytes | None = None,
) -> str:
    """Return the document MIME type from the file extension or declared MIME.

    When neither is conclusive the bytes decide: a ``%PDF-`` header or any
    NUL byte in the first KiB goes to the PDF reader (whose failure is a
    clear ExtractionError), anything else is read as plain text. Without
    bytes the default is PDF.
    """
    if filename:
        ext = PurePosixPath(filename).suffix.lower()
        if ext in SUPPORTED_DOC_EXTENSIONS:
            return SUPPORTED_DOC_EXTENSIONS[ext]
    if mime_type:
        mime = mime_type.split(";", 1)[0].strip().lower()
        if mime in (PDF_MIME, DOCX_MIME):
            return mime
        if mime.startswith("text/"):
            return "text/plain"
    if data is not None:
        head = bytes(data[:SNIFF_BYTES])
        if head.startswith(PDF_MAGIC) or b"\x00" in head:
            return PDF_MIME
        return "text/plain"
    return PDF_MIME


def extract_text(
    data: bytes,
    filename: str | None = None,
    mime_type: str | None = None,
) -> str:
    """Extract text from any supported study document.

    Args:
        data: Raw file bytes.
        filename: Original name or storage path; its extension drives dispatch.
        mime_type: Declared content type, used when the extension is unknown.
            Failing both, the leading bytes are sniffed.

    Returns:
        Trimmed text, at most ``MAX_EXTRACTED_CHARS`` characters.

    Raises:
        ExtractionError: If the document yields no usable text.
    """
    if not data:
        raise ExtractionError("The file is empty.")

    doc_type = detect_document_type(filename, mime_type, data)
    if doc_type == DOCX_MIME:
        return extract_docx_text(data)
    if doc_type == PDF_MIME:
        return extract_pdf_text(data)
    return extract_plain_text(data)
