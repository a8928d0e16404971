"""
Fatal error types.

Only context construction can fail a run. Everything that happens after
an AnalysisContext exists (ineligible analyzers, unknown names, analyzer
crashes, fix-generation failures) is recorded in result envelopes instead.
"""

from __future__ import annotations

from enum import Enum


class ExtractionFailureReason(str, Enum):
    INVALID_FILE = "invalid_file"
    FILE_TOO_LARGE = "file_too_large"
    TOO_MANY_PAGES = "too_many_pages"
    ENCRYPTED = "encrypted"
    NO_TEXT_CONTENT = "no_text_content"
    PARSING_ERROR = "parsing_error"


class ContextConstructionError(ValueError):
    """Raised when an AnalysisContext cannot be built for a document."""


class DocumentExtractionError(ContextConstructionError):
    def __init__(self, reason: ExtractionFailureReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason

    def __str__(self) -> str:
        return f"[{self.reason.value}] {self.args[0]}"
