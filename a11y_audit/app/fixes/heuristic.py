"""
Offline fix generator.

Deterministic, rule-based remedy text for every fix kind the built-in
analyzers plan. Needs no network access and no credentials, so it is
the generator used in tests and in deployments without a model.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List
from urllib.parse import urlparse

from a11y_audit.app.analyzers.text_utils import STOP_WORDS, file_stem
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext

logger = logging.getLogger(__name__)


# Checked in order against the link context; first match wins.
LINK_CONTEXT_LABELS = (
    (("download",), "Download document"),
    (("report", "study"), "View full report"),
    (("contact", "support"), "Contact support"),
    (("product", "service"), "Learn about our services"),
    (("policy", "terms"), "Read privacy policy"),
)

CAPTION_RULES = (
    (("financial", "budget"), "Financial data table with {rows} rows and {columns} columns"),
    (("result", "data"), "Data table showing results with {rows} entries"),
    (("comparison",), "Comparison table with {columns} categories"),
)

MAX_ALT_TEXT_WORDS = 6

_NUMERIC = re.compile(r"^\d+(\.\d+)?$")
_WORD = re.compile(r"[A-Za-z][A-Za-z'-]+")


def _topic_words(text: str, exclude: str = "", limit: int = MAX_ALT_TEXT_WORDS) -> List[str]:
    skip = {word.lower() for word in exclude.split()}
    words: List[str] = []
    for word in _WORD.findall(text):
        lowered = word.lower()
        if len(lowered) <= 3 or lowered in STOP_WORDS or lowered in skip:
            continue
        if lowered not in (w.lower() for w in words):
            words.append(word)
        if len(words) >= limit:
            break
    return words


class HeuristicFixGenerator:
    """
    Rule-based implementation of FixGenerator.

    Unknown fix kinds yield an empty string, which callers treat as
    "no fix proposed".
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Callable[[FixRequest, AnalysisContext], str]] = {
            "link_text_improvement": self._link_text,
            "link_text_uniqueness": self._link_uniqueness,
            "table_header_generation": self._table_headers,
            "table_caption_generation": self._table_caption,
            "heading_structure_optimization": self._heading_outline,
            "heading_uniqueness": self._heading_uniqueness,
            "alt_text_generation": self._alt_text,
            "metadata_title": self._metadata_title,
            "metadata_subject": self._metadata_subject,
            "metadata_keywords": self._metadata_keywords,
            "metadata_language": self._metadata_language,
            "metadata_accessibility": self._metadata_accessibility,
        }

    @property
    def supported_kinds(self) -> List[str]:
        return sorted(self._handlers)

    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        handler = self._handlers.get(request.kind)
        if handler is None:
            logger.debug("No heuristic for fix kind %s", request.kind)
            return ""
        return handler(request, context)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    @staticmethod
    def _link_text(request: FixRequest, context: AnalysisContext) -> str:
        hints = request.hints
        kind = hints.get("link_kind")
        text = request.subject.strip()

        if kind == "email":
            return f"Email {text}"
        if kind == "phone":
            return f"Call {text}"
        if kind == "url":
            domain = urlparse(hints.get("url") or text).netloc
            if domain.startswith("www."):
                domain = domain[4:]
            return f"Visit {domain or 'external site'}"

        link_context = str(hints.get("context", "")).lower()
        for terms, label in LINK_CONTEXT_LABELS:
            if any(term in link_context for term in terms):
                return label

        topic = _topic_words(link_context.replace("[link]", ""), exclude=text, limit=1)
        return f"Learn more about {topic[0]}" if topic else "Learn more details"

    @staticmethod
    def _link_uniqueness(request: FixRequest, context: AnalysisContext) -> str:
        return (
            "Review duplicate link texts to ensure they lead to the same "
            "destination or make them unique"
        )

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @staticmethod
    def _table_headers(request: FixRequest, context: AnalysisContext) -> str:
        hints = request.hints
        sample: List[List[str]] = hints.get("sample_data") or []
        columns = int(hints.get("columns") or max((len(row) for row in sample), default=0))

        headers: List[str] = []
        for index in range(columns):
            cells = [row[index] for row in sample if index < len(row)]
            if index == 0:
                headers.append("Item")
            elif any(_NUMERIC.match(cell) for cell in cells):
                headers.append("Value")
            elif any("%" in cell for cell in cells):
                headers.append("Percentage")
            elif any("$" in cell for cell in cells):
                headers.append("Amount")
            else:
                headers.append(f"Column {index + 1}")

        return " | ".join(headers)

    @staticmethod
    def _table_caption(request: FixRequest, context: AnalysisContext) -> str:
        hints: Dict[str, Any] = request.hints
        rows = hints.get("rows", 0)
        columns = hints.get("columns", 0)
        table_context = str(hints.get("context", request.subject)).lower()

        for terms, template in CAPTION_RULES:
            if any(term in table_context for term in terms):
                return template.format(rows=rows, columns=columns)

        return (
            f"Table {hints.get('table_number', 1)}: Data organized in "
            f"{rows} rows and {columns} columns"
        )

    # ------------------------------------------------------------------
    # Headings
    # ------------------------------------------------------------------

    @staticmethod
    def _heading_outline(request: FixRequest, context: AnalysisContext) -> str:
        title = request.hints.get("document_title") or file_stem(context.file_name)
        lines = [
            "Optimized heading structure:",
            f"H1: {title} (Main Document Title)",
        ]
        for index, heading in enumerate(request.hints.get("headings", [])):
            lines.append(f"H{min(index + 2, 6)}: {heading}")
        return "\n".join(lines)

    @staticmethod
    def _heading_uniqueness(request: FixRequest, context: AnalysisContext) -> str:
        duplicates = request.hints.get("duplicates", [])
        return "\n".join(
            f'"{heading}" -> "{heading} (Section {index + 1})"'
            for index, heading in enumerate(duplicates)
        )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def _alt_text(request: FixRequest, context: AnalysisContext) -> str:
        hints = request.hints
        kind = str(hints.get("image_kind", "image"))
        reference = request.subject or f"{kind.capitalize()} {hints.get('image_number', 1)}"

        topic = _topic_words(str(hints.get("context", "")), exclude=reference)
        if topic:
            alt_text = f"{reference} showing {' '.join(topic).lower()}"
        else:
            alt_text = f"{reference} supporting the surrounding content"

        if hints.get("is_complex"):
            alt_text += "; provide an extended description of the data it presents"
        return alt_text

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @staticmethod
    def _metadata_title(request: FixRequest, context: AnalysisContext) -> str:
        return str(request.hints.get("recommended_title", ""))

    @staticmethod
    def _metadata_subject(request: FixRequest, context: AnalysisContext) -> str:
        return str(request.hints.get("recommended_subject", ""))

    @staticmethod
    def _metadata_keywords(request: FixRequest, context: AnalysisContext) -> str:
        return ", ".join(request.hints.get("recommended_keywords", []))

    @staticmethod
    def _metadata_language(request: FixRequest, context: AnalysisContext) -> str:
        return str(request.hints.get("language") or context.language)

    @staticmethod
    def _metadata_accessibility(request: FixRequest, context: AnalysisContext) -> str:
        return "Accessibility tags enabled with proper document structure"
