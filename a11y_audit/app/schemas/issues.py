"""
Issue and fix schema shared by every analyzer.

Analyzers emit into this vocabulary and nothing else:
- Issue: a detected accessibility defect
- Fix: a proposed remedy (never applied by this engine)
- ResultEnvelope: the record of one analyzer invocation

All models are frozen. Rule references are validated against the
versioned rule catalog at construction time.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from a11y_audit.app.catalog import validate_rule_ids


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class IssueCategory(str, Enum):
    MISSING_ALT_TEXT = "missing_alt_text"
    HEADING_STRUCTURE = "heading_structure"
    TABLE_HEADERS = "table_headers"
    LINK_TEXT = "link_text"
    METADATA = "metadata"
    READING_ORDER = "reading_order"
    COLOR_CONTRAST = "color_contrast"


class Severity(str, Enum):
    """
    Severity of an issue.

    Ordering is intentional and MUST remain stable; scoring weights
    are keyed on these values.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ---------------------------------------------------------------------------
# Issue / Fix
# ---------------------------------------------------------------------------


class Issue(BaseModel):
    category: IssueCategory
    severity: Severity
    description: str = Field(..., min_length=1)
    location: Optional[str] = Field(
        None,
        description="Human-readable location hint, e.g. 'Page 2'",
    )
    rule_ids: List[str] = Field(default_factory=list)
    suggestion: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("rule_ids")
    @classmethod
    def rule_ids_must_be_catalogued(cls, v: List[str]) -> List[str]:
        return validate_rule_ids(v)


class Fix(BaseModel):
    """
    A proposed remedy.

    applied is True only when a remedy was written back into the
    document. This engine never mutates documents, so analyzers always
    produce applied=False; the field exists for downstream remediators.
    """

    kind: str = Field(..., min_length=1)
    description: str
    applied: bool = False
    rule_ids: List[str] = Field(default_factory=list)
    before_value: Optional[str] = None
    after_value: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("rule_ids")
    @classmethod
    def rule_ids_must_be_catalogued(cls, v: List[str]) -> List[str]:
        return validate_rule_ids(v)


# ---------------------------------------------------------------------------
# Analyzer-level records
# ---------------------------------------------------------------------------


class AnalyzerDescriptor(BaseModel):
    name: str
    description: str
    rule_ids: List[str]

    model_config = ConfigDict(frozen=True, extra="forbid")


class ResultEnvelope(BaseModel):
    """
    Outcome of exactly one analyzer invocation.

    success=False covers three situations that are distinguished by
    the remaining fields:
    - registry miss (error set, skipped False, no issues)
    - ineligible document (skipped True)
    - analyzer-internal error (error set, partial issues/fixes kept)
    """

    analyzer_name: str
    success: bool
    issues: List[Issue] = Field(default_factory=list)
    fixes: List[Fix] = Field(default_factory=list)
    elapsed_ms: float = Field(0.0, ge=0.0)
    error: Optional[str] = None
    skipped: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")
