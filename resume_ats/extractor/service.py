"""Resume text extraction service.

Extraction is a thin adapter in front of the analyzers: it turns document
bytes into plain text and never judges the quality of that text.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from pathlib import Path

from resume_ats.errors import ExtractionFailure, UnsupportedFormat
from resume_ats.extractor.models import SourceFormat

logger = logging.getLogger(__name__)


def _extract_pdf(data: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(data))
    pages = [(page.extract_text() or "").strip() for page in reader.pages]
    return "\n".join(page for page in pages if page)


def _extract_docx(data: bytes) -> str:
    from docx import Document

    document = Document(io.BytesIO(data))
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    return "\n".join(paragraphs)


def _extract_doc(data: bytes) -> str:
    # Legacy .doc files are read as text; binary content degrades to replacement chars.
    return data.decode("utf-8", errors="replace")


_EXTRACTORS: dict[SourceFormat, Callable[[bytes], str]] = {
    SourceFormat.PDF: _extract_pdf,
    SourceFormat.DOC: _extract_doc,
    SourceFormat.DOCX: _extract_docx,
}


def extract_text(data: bytes, source_format: SourceFormat | str) -> str:
    """Extract plain text from document bytes.

    Raises:
        UnsupportedFormat: ``source_format`` is not PDF, DOC or DOCX.
        ExtractionFailure: the document could not be parsed.
    """
    resolved = SourceFormat.coerce(source_format)
    if resolved is None:
        raise UnsupportedFormat("A source format is required for extraction")
    extractor = _EXTRACTORS[resolved]

    try:
        text = extractor(data)
    except Exception as e:
        logger.debug("Extraction failed for %s document", resolved.value, exc_info=True)
        raise ExtractionFailure(
            f"Failed to parse {resolved.value.upper()} file: {e}", e
        ) from e

    logger.debug("Extracted %d characters from %s document", len(text), resolved.value)
    return text


def extract_file(path: Path | str) -> tuple[str, SourceFormat]:
    """Read a document from disk and return ``(text, source_format)``."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Resume not found: {file_path}")

    source_format = SourceFormat.from_path(file_path)
    return extract_text(file_path.read_bytes(), source_format), source_format
