"""
Heading-structure analyzer.

Infers a heading outline from plain text lines and checks it for the
navigation problems screen reader users hit most often: no headings,
several top-level headings, skipped levels, duplicate or empty headings.

Heading candidates (first matching rule wins):
    1. numeric prefix "1.", "1.2", "1.2.3" (level = number of components)
    2. "Chapter N" / "Section N" / "Part N" (level 1)
    3. ALL CAPS line of 3-80 characters
    4. Title Case line (>70% capitalized words) under 100 characters
    5. short line (<80 characters) followed by a blank line

Rules 3-5 have no explicit level, so the level is estimated from the
line's relative position in the document.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.analyzers.base import BaseAnalyzer, FixPlan
from a11y_audit.app.analyzers.text_utils import (
    ends_sentence,
    file_stem,
    find_issue,
    line_offsets,
    page_for_offset,
    split_lines,
    window,
)
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue, IssueCategory, Severity

logger = logging.getLogger(__name__)


MIN_TEXT_LENGTH = 500
NO_HEADINGS_TEXT_LENGTH = 2000
MAX_HEADING_LEVEL = 6
OUTLINE_LIMIT = 10

_NUMERIC_PREFIX = re.compile(r"^(\d+(?:\.\d+)*)\.?\s+(\S.*)$")
_SECTION_KEYWORD = re.compile(
    r"^(?:chapter|section|part)\s+\d+\b[\s.:\-]*(.*)$",
    re.IGNORECASE,
)


class Heading(BaseModel):
    text: str = Field(..., description="Heading label without numbering")
    raw: str = Field(..., description="Full trimmed source line")
    level: int = Field(..., ge=1, le=MAX_HEADING_LEVEL)
    line_number: int
    page: int
    context: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")


class HeadingAnalysis(BaseModel):
    headings: List[Heading] = Field(default_factory=list)
    has_logical_structure: bool = True
    skipped_levels: List[int] = Field(default_factory=list)
    duplicate_headings: List[str] = Field(default_factory=list)
    empty_headings: List[Heading] = Field(default_factory=list)
    too_many_h1: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


# ----------------------------------------------------------------------
# Detection helpers
# ----------------------------------------------------------------------

def positional_level(index: int, total_lines: int) -> int:
    ratio = index / total_lines if total_lines else 0.0
    if ratio < 0.1:
        return 1
    if ratio < 0.3:
        return 2
    if ratio < 0.6:
        return 3
    return 4


def is_title_case(line: str) -> bool:
    words = line.split()
    if not words:
        return False
    capitalized = sum(1 for word in words if word[0].isupper())
    return capitalized / len(words) > 0.7


def detect_heading(lines: List[str], index: int) -> Optional[Tuple[int, str]]:
    """
    Return (level, label) when lines[index] looks like a heading.
    """
    line = lines[index].strip()
    if not line:
        return None

    numeric = _NUMERIC_PREFIX.match(line)
    if numeric and len(line) < 100:
        components = numeric.group(1).split(".")
        return min(len(components), MAX_HEADING_LEVEL), numeric.group(2).strip()

    keyword = _SECTION_KEYWORD.match(line)
    if keyword:
        return 1, keyword.group(1).strip()

    estimated = positional_level(index, len(lines))

    if line.isupper() and 3 <= len(line) <= 80:
        return estimated, line

    if is_title_case(line) and len(line) < 100 and not ends_sentence(line):
        return estimated, line

    followed_by_blank = index < len(lines) - 1 and not lines[index + 1].strip()
    if followed_by_blank and len(line) < 80 and not ends_sentence(line):
        return estimated, line

    return None


def extract_headings(text: str) -> List[Heading]:
    lines = split_lines(text)
    offsets = line_offsets(lines)
    headings: List[Heading] = []

    for index, line in enumerate(lines):
        detected = detect_heading(lines, index)
        if detected is None:
            continue
        level, label = detected
        start, end = window(lines, index, 2, 2)
        headings.append(
            Heading(
                text=label,
                raw=line.strip(),
                level=level,
                line_number=index + 1,
                page=page_for_offset(offsets[index]),
                context=" ".join(lines[start:end]).strip(),
            )
        )

    return headings


def find_skipped_levels(headings: List[Heading]) -> List[int]:
    skipped = set()
    max_level = 0
    for heading in headings:
        if heading.level > max_level + 1:
            skipped.update(range(max_level + 1, heading.level))
        max_level = max(max_level, heading.level)
    return sorted(skipped)


def has_logical_structure(headings: List[Heading]) -> bool:
    max_level = 0
    for heading in headings:
        if heading.level > max_level + 1:
            return False
        max_level = max(max_level, heading.level)
    return True


def find_duplicate_headings(headings: List[Heading]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for heading in headings:
        key = heading.text.strip().lower()
        if not key:
            continue
        if key in seen:
            if heading.text not in duplicates:
                duplicates.append(heading.text)
        else:
            seen.add(key)
    return duplicates


# ----------------------------------------------------------------------
# Analyzer
# ----------------------------------------------------------------------

class HeadingStructureAnalyzer(BaseAnalyzer):
    name = "heading_structure"
    description = (
        "Infers the heading outline and checks hierarchy, uniqueness "
        "and navigability"
    )
    rule_ids = ("1.3.1", "2.4.1", "2.4.6", "2.4.10")

    def eligible(self, context: AnalysisContext) -> bool:
        return context.text_length > MIN_TEXT_LENGTH

    def analyze(self, context: AnalysisContext) -> HeadingAnalysis:
        headings = extract_headings(context.text)
        h1_count = sum(1 for h in headings if h.level == 1)

        logger.debug("Detected %s heading candidates", len(headings))

        return HeadingAnalysis(
            headings=headings,
            has_logical_structure=has_logical_structure(headings),
            skipped_levels=find_skipped_levels(headings),
            duplicate_headings=find_duplicate_headings(headings),
            empty_headings=[h for h in headings if not h.text.strip()],
            too_many_h1=h1_count > 1,
        )

    def identify_issues(
        self,
        analysis: HeadingAnalysis,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        if not analysis.headings and context.text_length > NO_HEADINGS_TEXT_LENGTH:
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.HIGH,
                description="Document lacks heading structure for navigation",
                rule_ids=["1.3.1", "2.4.1"],
                suggestion=(
                    "Add headings to create a logical document structure "
                    "that aids navigation"
                ),
            )

        if analysis.too_many_h1:
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.MEDIUM,
                description="Document has multiple H1 headings",
                rule_ids=["1.3.1"],
                suggestion=(
                    "Use only one H1 heading per document, typically for "
                    "the main title"
                ),
            )

        if analysis.skipped_levels:
            levels = ", ".join(str(level) for level in analysis.skipped_levels)
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.MEDIUM,
                description=f"Heading structure skips levels: {levels}",
                rule_ids=["1.3.1"],
                suggestion=(
                    "Use heading levels sequentially (H1, H2, H3...) "
                    "without skipping levels"
                ),
            )

        if analysis.duplicate_headings:
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.LOW,
                description=(
                    f"Found {len(analysis.duplicate_headings)} duplicate headings"
                ),
                rule_ids=["2.4.6"],
                suggestion=(
                    "Make headings unique and descriptive to improve "
                    "navigation clarity"
                ),
            )

        if analysis.empty_headings:
            first = analysis.empty_headings[0]
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.HIGH,
                description=f"Found {len(analysis.empty_headings)} empty headings",
                location=f"Page {first.page}",
                rule_ids=["1.3.1", "2.4.6"],
                suggestion="Remove empty headings or add meaningful content",
            )

        if not analysis.has_logical_structure:
            yield Issue(
                category=IssueCategory.HEADING_STRUCTURE,
                severity=Severity.MEDIUM,
                description="Document heading structure is not logically organized",
                rule_ids=["1.3.1", "2.4.10"],
                suggestion=(
                    "Reorganize headings to create a logical hierarchy that "
                    "reflects content structure"
                ),
            )

    def plan_fixes(
        self,
        analysis: HeadingAnalysis,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        if not analysis.has_logical_structure or analysis.skipped_levels:
            outline = analysis.headings[:OUTLINE_LIMIT]
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="heading_structure_optimization",
                    issue=(
                        find_issue(issues, "Document heading structure")
                        or find_issue(issues, "Heading structure skips")
                    ),
                    subject="\n".join(f"H{h.level}: {h.text}" for h in outline),
                    hints={
                        "document_title": file_stem(context.file_name),
                        "headings": [h.text for h in outline],
                        "skipped_levels": list(analysis.skipped_levels),
                    },
                ),
                description="Generated optimized heading structure",
                rule_ids=["1.3.1", "2.4.1", "2.4.6"],
                before_value=(
                    f"{len(analysis.headings)} headings with structural issues"
                ),
            )

        if analysis.duplicate_headings:
            count = len(analysis.duplicate_headings)
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="heading_uniqueness",
                    issue=find_issue(issues, f"Found {count} duplicate headings"),
                    subject=", ".join(analysis.duplicate_headings),
                    hints={"duplicates": list(analysis.duplicate_headings)},
                ),
                description=f"Generated unique alternatives for {count} duplicate headings",
                rule_ids=["2.4.6"],
                before_value=", ".join(analysis.duplicate_headings),
            )
