"""
AnalysisContext construction.

The one place where a run can fail: bad compliance levels and invalid
context values are raised as ContextConstructionError before any
analyzer executes.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Optional, Union

from pydantic import ValidationError

from a11y_audit.app.analyzers.text_utils import CHARS_PER_PAGE
from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.errors import ContextConstructionError
from a11y_audit.app.extraction.pdf_text import ExtractedDocument
from a11y_audit.app.schemas.context import AnalysisContext, DocumentMetadata

logger = logging.getLogger(__name__)


_IMAGE_HINTS = re.compile(
    r"\b(?:figure|chart|diagram|illustration|photo|image)", re.IGNORECASE
)
_TABLE_HINTS = re.compile(r"\btable\b|\||\t", re.IGNORECASE)
_LINK_HINTS = re.compile(r"https?://|www\.|\.com|\.org|@", re.IGNORECASE)


def detect_images(text: str) -> bool:
    return _IMAGE_HINTS.search(text) is not None


def detect_tables(text: str) -> bool:
    return _TABLE_HINTS.search(text) is not None


def detect_links(text: str) -> bool:
    return _LINK_HINTS.search(text) is not None


def resolve_language(
    declared: Optional[str],
    document_language: Optional[str],
    default: str,
) -> str:
    for candidate in (declared, document_language):
        if candidate and candidate.strip():
            return candidate.strip()
    return default


def resolve_compliance_level(
    level: Union[ComplianceLevel, str, None],
    default: ComplianceLevel,
) -> ComplianceLevel:
    if level is None or level == "":
        return default
    try:
        return ComplianceLevel(str(getattr(level, "value", level)).upper())
    except ValueError:
        raise ContextConstructionError(
            f"Unknown compliance level '{level}'. "
            f"Allowed values: {[l.value for l in ComplianceLevel]}"
        ) from None


def extracted_from_text(
    text: str,
    *,
    page_count: Optional[int] = None,
    metadata: Optional[DocumentMetadata] = None,
) -> ExtractedDocument:
    """Wrap pre-extracted text so it can go through the same builder."""
    if page_count is None:
        page_count = math.ceil(len(text) / CHARS_PER_PAGE) if text else 0
    try:
        return ExtractedDocument(
            page_count=page_count,
            text=text,
            byte_length=len(text.encode("utf-8")),
            metadata=metadata or DocumentMetadata(),
        )
    except ValidationError as exc:
        raise ContextConstructionError(str(exc)) from exc


def build_analysis_context(
    extracted: ExtractedDocument,
    *,
    file_name: str = "document.pdf",
    compliance_level: Union[ComplianceLevel, str, None] = None,
    language: Optional[str] = None,
    default_language: str = "en",
    default_level: ComplianceLevel = ComplianceLevel.AA,
) -> AnalysisContext:
    text = extracted.text
    level = resolve_compliance_level(compliance_level, default_level)

    try:
        context = AnalysisContext(
            text=text,
            page_count=extracted.page_count,
            byte_length=extracted.byte_length,
            has_images=detect_images(text),
            has_tables=detect_tables(text),
            has_links=detect_links(text),
            language=resolve_language(
                language, extracted.metadata.language, default_language
            ),
            compliance_level=level,
            file_name=file_name or "document.pdf",
            metadata=extracted.metadata,
        )
    except ValidationError as exc:
        raise ContextConstructionError(str(exc)) from exc

    logger.debug(
        "Built context for %s: %s chars, images=%s tables=%s links=%s",
        context.file_name,
        context.text_length,
        context.has_images,
        context.has_tables,
        context.has_links,
    )
    return context
