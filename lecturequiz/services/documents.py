from __future__ import annotations

import io
import logging
from pathlib import PurePath
from typing import Optional

import config
from lecturequiz.utils.text import normalize_newlines

log = logging.getLogger("LectureQuiz")

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt", ".md")


class DocumentError(Exception):
    pass


class UnsupportedDocumentError(DocumentError):
    pass


class DocumentTooLargeError(DocumentError):
    pass


class DocumentParseError(DocumentError):
    pass


def pdf_to_text(pdf_bytes: bytes) -> str:
    """
    Extract selectable text from PDF (no OCR).
    Requires: pip install pymupdf
    """
    import fitz

    chunks: list[str] = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for page in doc:
            chunks.append(page.get_text("text"))

    return "\n".join(chunks)


def docx_to_text(docx_bytes: bytes) -> str:
    import docx

    doc = docx.Document(io.BytesIO(docx_bytes))
    return "\n".join(p.text for p in doc.paragraphs)


def extension_of(filename: str) -> str:
    return PurePath((filename or "").strip()).suffix.lower()


def extract_text(filename: str, data: bytes, *, max_bytes: Optional[int] = None) -> str:
    if max_bytes is None:
        max_bytes = config.MAX_UPLOAD_BYTES

    ext = extension_of(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedDocumentError(
            "Unsupported file type. Upload a PDF, DOCX or TXT file."
        )

    if len(data) > max_bytes:
        raise DocumentTooLargeError(f"File too large (max {max_bytes // 1_000_000}MB).")

    try:
        if ext == ".pdf":
            text = pdf_to_text(data)
        elif ext == ".docx":
            text = docx_to_text(data)
        else:
            text = data.decode("utf-8", errors="replace")
    except Exception as e:
        log.warning("Could not parse %s: %s", filename, e)
        raise DocumentParseError(f"Could not read {ext[1:].upper()} file: {e}") from e

    text = normalize_newlines(text)
    log.debug("Extracted %d chars from %s", len(text), filename)
    return text
