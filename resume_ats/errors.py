"""Typed errors raised by resume analysis.

Callers map these to their own presentation layer (HTTP status codes, exit
codes, ...). Extraction and format errors are final for a given input;
remote analyzer errors may be retried or routed to the deterministic
analyzer at the caller's discretion.
"""

from __future__ import annotations


class ResumeScoringError(Exception):
    """Base class for all resume scoring errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class UnsupportedFormat(ResumeScoringError):
    """The document format is not one of PDF, DOC or DOCX."""


class ExtractionFailure(ResumeScoringError):
    """Text could not be extracted from the document bytes."""


class InsufficientContent(ResumeScoringError):
    """The extracted text is too short to be scored."""


class ConfigurationError(ResumeScoringError):
    """The remote analyzer is unusable (e.g. no API credential)."""


class ParseError(ResumeScoringError):
    """The remote model response does not match the expected schema."""


class RemoteAnalyzerError(ResumeScoringError):
    """The remote model call failed (transport or provider error)."""


class RemoteTimeoutError(RemoteAnalyzerError):
    """The remote model call exceeded the configured timeout."""


class ScoringInternalError(ResumeScoringError):
    """An unexpected failure inside an analyzer."""
