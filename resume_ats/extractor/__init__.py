"""Resume text extraction.

Public API:
    - SourceFormat: Closed set of accepted document formats
    - extract_text: Extract plain text from document bytes
    - extract_file: Extract plain text from a document on disk
"""

from resume_ats.extractor.models import SourceFormat
from resume_ats.extractor.service import extract_file, extract_text

__all__ = [
    "SourceFormat",
    "extract_text",
    "extract_file",
]
