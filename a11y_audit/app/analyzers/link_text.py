"""
Link-text analyzer.

Plain text has no link annotations, so link candidates are recovered
from four independent pattern classes applied line by line: URLs,
e-mail addresses, phone numbers and generic call-to-action phrases.
Each candidate is classified (generic, descriptive, external) and given
a context window built from its line and the neighbouring lines.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.analyzers.base import BaseAnalyzer, FixPlan
from a11y_audit.app.analyzers.text_utils import (
    find_issue,
    line_offsets,
    page_for_offset,
    split_lines,
)
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue, IssueCategory, Severity

logger = logging.getLogger(__name__)


MAX_LINKS = 50
MAX_FIXES_PER_GROUP = 10
CONTEXT_CHARS = 100
NEIGHBOUR_CHARS = 30
THIN_CONTEXT_CHARS = 20
LINK_MARKER = "[LINK]"

LINK_PATTERNS = (
    ("url", re.compile(r"https?://[^\s]+", re.IGNORECASE)),
    ("email", re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")),
    (
        "phone",
        re.compile(r"(?:\+?1[-.\s]?)?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}"),
    ),
    (
        "generic",
        re.compile(
            r"\b(?:click here|read more|learn more|more info|download|link)\b",
            re.IGNORECASE,
        ),
    ),
)

GENERIC_LINK_TEXTS = frozenset(
    {
        "click here", "read more", "learn more", "more info", "more information",
        "download", "link", "here", "this link", "continue", "next", "previous",
    }
)

NON_DESCRIPTIVE_PHRASES = (
    "click here", "read more", "learn more", "more info", "info",
    "download", "link", "here", "this", "more", "continue",
)

EXTERNAL_WARNING_PHRASES = (
    "external", "opens in new", "new window", "new tab", "leaves site",
)


class LinkCandidate(BaseModel):
    text: str
    kind: str = Field(..., description="url | email | phone | generic")
    url: Optional[str] = None
    line_number: int
    position: int
    page: int
    context_text: str
    surrounding_length: int = Field(
        ...,
        description="Characters of context around the link, excluding the link",
    )
    is_generic: bool
    is_descriptive: bool
    is_external: bool

    model_config = ConfigDict(frozen=True, extra="forbid")


class LinkAnalysis(BaseModel):
    links: List[LinkCandidate] = Field(default_factory=list)
    generic_links: List[LinkCandidate] = Field(default_factory=list)
    undescriptive_links: List[LinkCandidate] = Field(default_factory=list)
    duplicate_texts: List[str] = Field(default_factory=list)
    links_without_context: List[LinkCandidate] = Field(default_factory=list)
    external_without_warning: List[LinkCandidate] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


# ----------------------------------------------------------------------
# Classification helpers
# ----------------------------------------------------------------------

def is_generic_link_text(text: str) -> bool:
    return text.strip().lower() in GENERIC_LINK_TEXTS


def is_descriptive_link_text(text: str) -> bool:
    words = text.split()
    if len(words) < 2 or len(text.strip()) < 4:
        return False
    lowered = text.lower()
    return not any(phrase in lowered for phrase in NON_DESCRIPTIVE_PHRASES)


def is_internal_link(url: str) -> bool:
    return "#" in url or url.startswith("/") or "localhost" in url


def has_external_warning(link: LinkCandidate) -> bool:
    lowered = link.context_text.lower()
    return any(phrase in lowered for phrase in EXTERNAL_WARNING_PHRASES)


def find_duplicate_link_texts(links: List[LinkCandidate]) -> List[str]:
    counts = Counter(link.text.strip().lower() for link in links)
    ordered: List[str] = []
    for link in links:
        key = link.text.strip().lower()
        if counts[key] > 1 and len(key) > 3 and key not in ordered:
            ordered.append(key)
    return ordered


def build_context(
    lines: List[str],
    line_index: int,
    start: int,
    end: int,
) -> Tuple[str, int]:
    """
    Return (context_text, surrounding_length) for a match at [start, end).
    """
    line = lines[line_index]
    before = line[max(0, start - CONTEXT_CHARS):start].strip()
    after = line[end:end + CONTEXT_CHARS].strip()
    previous = lines[line_index - 1][-NEIGHBOUR_CHARS:].strip() if line_index > 0 else ""
    following = (
        lines[line_index + 1][:NEIGHBOUR_CHARS].strip()
        if line_index < len(lines) - 1
        else ""
    )

    surrounding = " ".join(part for part in (previous, before, after, following) if part)
    context = " ".join(
        part for part in (previous, before, LINK_MARKER, after, following) if part
    )
    return context, len(surrounding)


def extract_links(text: str) -> List[LinkCandidate]:
    lines = split_lines(text)
    offsets = line_offsets(lines)
    links: List[LinkCandidate] = []

    for index, line in enumerate(lines):
        for kind, pattern in LINK_PATTERNS:
            for match in pattern.finditer(line):
                link_text = match.group(0)
                context, surrounding = build_context(
                    lines, index, match.start(), match.end()
                )
                position = offsets[index] + match.start()
                links.append(
                    LinkCandidate(
                        text=link_text,
                        kind=kind,
                        url=link_text if kind == "url" else None,
                        line_number=index + 1,
                        position=position,
                        page=page_for_offset(position),
                        context_text=context,
                        surrounding_length=surrounding,
                        is_generic=is_generic_link_text(link_text),
                        is_descriptive=is_descriptive_link_text(link_text),
                        is_external=kind == "url" and not is_internal_link(link_text),
                    )
                )
                if len(links) >= MAX_LINKS:
                    return links

    return links


# ----------------------------------------------------------------------
# Analyzer
# ----------------------------------------------------------------------

class LinkTextAnalyzer(BaseAnalyzer):
    name = "link_text"
    description = (
        "Checks link text for generic phrases, descriptiveness, "
        "duplicates and missing context"
    )
    rule_ids = ("2.4.4", "2.4.9", "3.2.1", "3.2.4")

    def eligible(self, context: AnalysisContext) -> bool:
        return context.has_links

    def analyze(self, context: AnalysisContext) -> LinkAnalysis:
        links = extract_links(context.text)
        logger.debug("Extracted %s link candidates", len(links))

        return LinkAnalysis(
            links=links,
            generic_links=[link for link in links if link.is_generic],
            undescriptive_links=[link for link in links if not link.is_descriptive],
            duplicate_texts=find_duplicate_link_texts(links),
            links_without_context=[
                link for link in links if link.surrounding_length < THIN_CONTEXT_CHARS
            ],
            external_without_warning=[
                link for link in links
                if link.is_external and not has_external_warning(link)
            ],
        )

    def identify_issues(
        self,
        analysis: LinkAnalysis,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        if not analysis.links:
            return

        if analysis.generic_links:
            yield Issue(
                category=IssueCategory.LINK_TEXT,
                severity=Severity.HIGH,
                description=(
                    f"Found {len(analysis.generic_links)} links with generic "
                    'text like "click here" or "read more"'
                ),
                rule_ids=["2.4.4", "2.4.9"],
                suggestion=(
                    "Replace generic link text with descriptive text that "
                    "explains the link destination or purpose"
                ),
            )

        if analysis.undescriptive_links:
            yield Issue(
                category=IssueCategory.LINK_TEXT,
                severity=Severity.MEDIUM,
                description=(
                    f"Found {len(analysis.undescriptive_links)} links with "
                    "insufficient descriptive text"
                ),
                rule_ids=["2.4.4"],
                suggestion=(
                    "Improve link text to be more descriptive of the "
                    "destination or action"
                ),
            )

        if analysis.duplicate_texts:
            yield Issue(
                category=IssueCategory.LINK_TEXT,
                severity=Severity.MEDIUM,
                description=(
                    f"Found {len(analysis.duplicate_texts)} sets of duplicate link text"
                ),
                rule_ids=["3.2.4"],
                suggestion=(
                    "Ensure identical link text leads to the same destination, "
                    "or make text unique for different destinations"
                ),
            )

        if analysis.external_without_warning:
            yield Issue(
                category=IssueCategory.LINK_TEXT,
                severity=Severity.LOW,
                description=(
                    f"Found {len(analysis.external_without_warning)} external "
                    "links without clear indication"
                ),
                rule_ids=["3.2.1"],
                suggestion=(
                    "Indicate external links clearly to inform users they "
                    "will leave the current context"
                ),
            )

        if analysis.links_without_context:
            yield Issue(
                category=IssueCategory.LINK_TEXT,
                severity=Severity.MEDIUM,
                description=(
                    f"Found {len(analysis.links_without_context)} links lacking "
                    "sufficient context"
                ),
                rule_ids=["2.4.4"],
                suggestion=(
                    "Ensure links have sufficient surrounding context or "
                    "improve the link text itself"
                ),
            )

    def plan_fixes(
        self,
        analysis: LinkAnalysis,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        generic_issue = find_issue(issues, f"Found {len(analysis.generic_links)} links with generic")
        undescriptive_issue = find_issue(
            issues, f"Found {len(analysis.undescriptive_links)} links with insufficient"
        )

        generic_positions = set()
        for link in analysis.generic_links[:MAX_FIXES_PER_GROUP]:
            generic_positions.add(link.position)
            yield self._improvement_plan(
                link,
                generic_issue,
                description="Improved generic link text",
                rule_ids=["2.4.4", "2.4.9"],
            )

        for link in analysis.undescriptive_links[:MAX_FIXES_PER_GROUP]:
            if link.is_generic and link.position in generic_positions:
                continue
            yield self._improvement_plan(
                link,
                undescriptive_issue,
                description="Enhanced link descriptiveness",
                rule_ids=["2.4.4"],
            )

        if analysis.duplicate_texts:
            count = len(analysis.duplicate_texts)
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="link_text_uniqueness",
                    issue=find_issue(issues, f"Found {count} sets of duplicate"),
                    subject=", ".join(analysis.duplicate_texts),
                    hints={"duplicates": list(analysis.duplicate_texts)},
                ),
                description=(
                    f"Identified {count} duplicate link texts requiring attention"
                ),
                rule_ids=["3.2.4"],
                before_value=", ".join(analysis.duplicate_texts),
            )

    def _improvement_plan(
        self,
        link: LinkCandidate,
        issue: Optional[Issue],
        *,
        description: str,
        rule_ids: List[str],
    ) -> FixPlan:
        return FixPlan(
            request=FixRequest(
                analyzer_name=self.name,
                kind="link_text_improvement",
                issue=issue,
                subject=link.text,
                hints={
                    "link_kind": link.kind,
                    "url": link.url,
                    "context": link.context_text,
                    "page": link.page,
                },
            ),
            description=description,
            rule_ids=rule_ids,
            before_value=link.text,
        )
