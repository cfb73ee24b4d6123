"""Data models for resume text extraction."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from resume_ats.errors import UnsupportedFormat


class SourceFormat(str, Enum):
    """Document formats accepted for resume analysis."""

    PDF = "pdf"
    DOC = "doc"
    DOCX = "docx"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @classmethod
    def from_mime_type(cls, mime_type: str) -> SourceFormat:
        """Resolve a MIME type, raising UnsupportedFormat for anything else."""
        normalized = (mime_type or "").split(";", 1)[0].strip().lower()
        for source_format, known in _MIME_TYPES.items():
            if normalized == known:
                return source_format
        raise UnsupportedFormat(f"Unsupported file type: {mime_type!r}")

    @classmethod
    def from_path(cls, path: Path | str) -> SourceFormat:
        """Resolve a file suffix (.pdf, .doc, .docx)."""
        suffix = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError as e:
            raise UnsupportedFormat(f"Unsupported file extension: {Path(path).name}") from e

    @classmethod
    def coerce(cls, value: SourceFormat | str | None) -> SourceFormat | None:
        """Accept an enum member, a format name or a MIME type."""
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if "/" in text:
            return cls.from_mime_type(text)
        try:
            return cls(text.lstrip("."))
        except ValueError as e:
            raise UnsupportedFormat(f"Unsupported file type: {value!r}") from e


_MIME_TYPES: dict[SourceFormat, str] = {
    SourceFormat.PDF: "application/pdf",
    SourceFormat.DOC: "application/msword",
    SourceFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
