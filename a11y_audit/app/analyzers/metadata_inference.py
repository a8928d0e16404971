"""
Metadata-inference analyzer.

Builds a metadata record for the document and checks it for missing or
low-quality fields. Without provider-supplied metadata the record is a
pseudo-record inferred from the file name and the declared language;
fields the extraction provider did read take precedence.

Recommendations (title, subject, keywords) are derived from the text
itself and feed the fix plans.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.analyzers.base import BaseAnalyzer, FixPlan
from a11y_audit.app.analyzers.text_utils import STOP_WORDS, file_stem, find_issue
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue, IssueCategory, Severity

logger = logging.getLogger(__name__)


SAMPLE_CHARS = 2000
TITLE_SCAN_LINES = 5
MAX_KEYWORDS = 8
DEFAULT_TITLE = "Document Title"
UNKNOWN_LANGUAGES = {"", "unknown", "und"}

# Checked in order; the first family with a matching term wins.
SUBJECT_FAMILIES = (
    (("report", "analysis"), "Analytical report containing data and findings"),
    (("manual", "guide", "instruction"), "Instructional guide and documentation"),
    (("policy", "procedure", "compliance"), "Policy and procedural documentation"),
    (("financial", "budget", "accounting"), "Financial documentation and data"),
    (("research", "study", "methodology"), "Research documentation and findings"),
    (
        ("technical", "specification", "engineering"),
        "Technical documentation and specifications",
    ),
    (("training", "education", "learning"), "Educational and training materials"),
)
DEFAULT_SUBJECT = "Document containing important information and content"

_LEADING_NUMBER = re.compile(r"^\d+\.?\s*")
_NON_WORD = re.compile(r"[^\w]")


class MetadataRecord(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    language: Optional[str] = None
    tagged: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class MetadataRecommendations(BaseModel):
    title: str
    subject: str
    keywords: List[str] = Field(default_factory=list)
    language: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class MetadataAnalysis(BaseModel):
    current: MetadataRecord
    missing: List[str] = Field(default_factory=list)
    inadequate: List[str] = Field(default_factory=list)
    recommendations: MetadataRecommendations

    model_config = ConfigDict(frozen=True, extra="forbid")


# ----------------------------------------------------------------------
# Inference helpers
# ----------------------------------------------------------------------

def _known_language(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip().lower() in UNKNOWN_LANGUAGES:
        return None
    return value.strip()


def current_metadata(context: AnalysisContext) -> MetadataRecord:
    provided = context.metadata
    stem = file_stem(context.file_name)

    title = provided.title if provided and provided.title else None
    if title is None and len(stem) > 5:
        title = stem

    return MetadataRecord(
        title=title,
        author=provided.author if provided else None,
        subject=provided.subject if provided else None,
        keywords=provided.keywords if provided else None,
        language=(
            _known_language(context.language)
            or _known_language(provided.language if provided else None)
        ),
        tagged=bool(provided.tagged) if provided and provided.tagged is not None else False,
    )


def find_missing(record: MetadataRecord) -> List[str]:
    missing = [
        field
        for field in ("title", "author", "subject", "language", "keywords")
        if not getattr(record, field)
    ]
    if not record.tagged:
        missing.append("accessibility_tags")
    return missing


def find_inadequate(record: MetadataRecord) -> List[str]:
    inadequate: List[str] = []

    if record.title:
        lowered = record.title.lower()
        if len(record.title) < 5 or "untitled" in lowered or "document" in lowered:
            inadequate.append("title")

    if record.subject and len(record.subject) < 10:
        inadequate.append("subject")

    if record.keywords:
        terms = {k.strip().lower() for k in re.split(r"[,;]", record.keywords) if k.strip()}
        if len(terms) < 3:
            inadequate.append("keywords")

    return inadequate


def clean_title(line: str) -> str:
    title = _LEADING_NUMBER.sub("", line)
    return " ".join(title.split())[:100]


def extract_potential_title(text: str) -> str:
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    for line in lines[:TITLE_SCAN_LINES]:
        if len(line) < 5 or not re.search(r"[A-Za-z]", line):
            continue
        if (
            10 <= len(line) <= 100
            and "page" not in line.lower()
            and "|" not in line
            and "\t" not in line
        ):
            return clean_title(line)
    return DEFAULT_TITLE


def extract_keywords(text: str) -> List[str]:
    counts: Counter = Counter()
    for word in text[:SAMPLE_CHARS].lower().split():
        cleaned = _NON_WORD.sub("", word)
        if len(cleaned) > 3 and cleaned not in STOP_WORDS and cleaned.isascii() and cleaned.isalpha():
            counts[cleaned] += 1

    frequent = [(word, count) for word, count in counts.items() if count >= 2]
    # Stable sort keeps first-seen order among equal counts.
    frequent.sort(key=lambda item: item[1], reverse=True)
    return [word for word, _ in frequent[:MAX_KEYWORDS]]


def infer_subject(text: str) -> str:
    lowered = text[:SAMPLE_CHARS].lower()
    for terms, subject in SUBJECT_FAMILIES:
        if any(term in lowered for term in terms):
            return subject
    return DEFAULT_SUBJECT


# ----------------------------------------------------------------------
# Analyzer
# ----------------------------------------------------------------------

class MetadataInferenceAnalyzer(BaseAnalyzer):
    name = "metadata_enhancer"
    description = (
        "Checks document title, language, subject, keywords and tagging "
        "metadata"
    )
    rule_ids = ("1.3.1", "3.1.1", "3.1.2")

    def __init__(self, default_language: str = "en") -> None:
        self._default_language = default_language

    def eligible(self, context: AnalysisContext) -> bool:
        return True

    def analyze(self, context: AnalysisContext) -> MetadataAnalysis:
        record = current_metadata(context)
        missing = find_missing(record)
        inadequate = find_inadequate(record)
        logger.debug("Metadata missing=%s inadequate=%s", missing, inadequate)

        return MetadataAnalysis(
            current=record,
            missing=missing,
            inadequate=inadequate,
            recommendations=MetadataRecommendations(
                title=extract_potential_title(context.text),
                subject=infer_subject(context.text),
                keywords=extract_keywords(context.text),
                language=record.language or self._default_language,
            ),
        )

    def identify_issues(
        self,
        analysis: MetadataAnalysis,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        missing = analysis.missing
        inadequate = analysis.inadequate

        if "title" in missing:
            yield self._issue(
                Severity.HIGH,
                "PDF lacks a proper document title",
                ["1.3.1"],
                "Add a descriptive title that clearly identifies the document content",
            )
        if "title" in inadequate:
            yield self._issue(
                Severity.MEDIUM,
                "PDF title is inadequate or generic",
                ["1.3.1"],
                "Improve the title to be more descriptive and meaningful",
            )
        if "language" in missing:
            yield self._issue(
                Severity.HIGH,
                "PDF lacks language specification",
                ["3.1.1"],
                "Specify the primary language of the document for accessibility tools",
            )
        if "author" in missing:
            yield self._issue(
                Severity.MEDIUM,
                "PDF lacks author information",
                ["1.3.1"],
                "Add author information for document identification and credibility",
            )
        if "subject" in missing:
            yield self._issue(
                Severity.MEDIUM,
                "PDF lacks subject/description metadata",
                ["1.3.1"],
                "Add a subject description that summarizes the document content",
            )
        if "subject" in inadequate:
            yield self._issue(
                Severity.LOW,
                "PDF subject is too short to describe the document",
                ["1.3.1"],
                "Expand the subject into a sentence that summarizes the content",
            )
        if "keywords" in missing:
            yield self._issue(
                Severity.LOW,
                "PDF lacks keyword metadata for discoverability",
                ["1.3.1"],
                "Add relevant keywords to improve document searchability",
            )
        if "keywords" in inadequate:
            yield self._issue(
                Severity.LOW,
                "PDF keyword metadata has fewer than 3 terms",
                ["1.3.1"],
                "Add more relevant keywords to improve document searchability",
            )
        if "accessibility_tags" in missing:
            yield self._issue(
                Severity.HIGH,
                "PDF is not tagged for accessibility",
                ["1.3.1"],
                "Enable accessibility tagging to support assistive technologies",
            )

    def plan_fixes(
        self,
        analysis: MetadataAnalysis,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        current = analysis.current
        recommended = analysis.recommendations
        missing = analysis.missing
        inadequate = analysis.inadequate
        hints = {
            "recommended_title": recommended.title,
            "recommended_subject": recommended.subject,
            "recommended_keywords": list(recommended.keywords),
            "language": recommended.language,
            "file_name": context.file_name,
        }

        if "title" in missing or "title" in inadequate:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="metadata_title",
                    issue=find_issue(issues, "PDF lacks a proper document title")
                    or find_issue(issues, "PDF title is inadequate"),
                    subject=current.title or "",
                    hints=hints,
                ),
                description="Generated enhanced document title",
                rule_ids=["1.3.1"],
                before_value=current.title or "No title",
            )

        if "subject" in missing or "subject" in inadequate:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="metadata_subject",
                    issue=find_issue(issues, "PDF lacks subject")
                    or find_issue(issues, "PDF subject is too short"),
                    subject=current.subject or "",
                    hints=hints,
                ),
                description="Generated document subject description",
                rule_ids=["1.3.1"],
                before_value=current.subject or "No subject",
            )

        if "keywords" in missing or "keywords" in inadequate:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="metadata_keywords",
                    issue=find_issue(issues, "PDF lacks keyword")
                    or find_issue(issues, "PDF keyword metadata"),
                    subject=current.keywords or "",
                    hints=hints,
                ),
                description=f"Generated {len(recommended.keywords)} relevant keywords",
                rule_ids=["1.3.1"],
                before_value=current.keywords or "No keywords",
            )

        if "language" in missing:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="metadata_language",
                    issue=find_issue(issues, "PDF lacks language"),
                    subject="",
                    hints=hints,
                ),
                description="Set document language for accessibility",
                rule_ids=["3.1.1"],
                before_value="No language specified",
            )

        if "accessibility_tags" in missing:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="metadata_accessibility",
                    issue=find_issue(issues, "PDF is not tagged"),
                    subject="",
                    hints=hints,
                ),
                description="Enable accessibility tagging and structure",
                rule_ids=["1.3.1"],
                before_value="Not tagged for accessibility",
            )

    def _issue(
        self,
        severity: Severity,
        description: str,
        rule_ids: List[str],
        suggestion: str,
    ) -> Issue:
        return Issue(
            category=IssueCategory.METADATA,
            severity=severity,
            description=description,
            rule_ids=rule_ids,
            suggestion=suggestion,
        )
