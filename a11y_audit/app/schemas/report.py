"""
Orchestration and audit report schemas.

These models are derived, read-only aggregates. They are produced once
at the end of a run and are safe to export to any number of formats.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.catalog import ComplianceLevel, RULE_CATALOG_VERSION
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Fix, Issue, ResultEnvelope


_FROZEN = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ExportFormat(str, Enum):
    JSON = "json"
    HTML = "html"
    MARKDOWN = "markdown"
    CSV = "csv"


# ---------------------------------------------------------------------------
# Orchestrator results
# ---------------------------------------------------------------------------


class RecommendationResult(BaseModel):
    selected: List[str] = Field(
        default_factory=list,
        description="Eligible analyzer names in execution priority order",
    )
    reasons: List[str] = Field(default_factory=list)
    complexity: Complexity

    model_config = _FROZEN


class ExecutionSummary(BaseModel):
    total_issues: int = 0
    total_fixes: int = 0
    elapsed_ms: float = 0.0
    overall_success: bool = True

    model_config = _FROZEN


class ExecutionResult(BaseModel):
    envelopes: List[ResultEnvelope] = Field(default_factory=list)
    summary: ExecutionSummary

    model_config = _FROZEN


class ExecutionStats(BaseModel):
    total_executions: int = 0
    success_rate: float = Field(0.0, description="Percentage of successful envelopes")
    average_elapsed_ms: float = 0.0
    most_used: List[str] = Field(default_factory=list)

    model_config = _FROZEN


# ---------------------------------------------------------------------------
# Audit report
# ---------------------------------------------------------------------------


class DocumentInfo(BaseModel):
    file_name: str
    file_size: int = 0
    page_count: int = 0
    language: str = "unknown"
    text_length: int = 0
    has_images: bool = False
    has_tables: bool = False
    has_links: bool = False

    model_config = _FROZEN

    @classmethod
    def from_context(cls, context: AnalysisContext) -> "DocumentInfo":
        return cls(
            file_name=context.file_name,
            file_size=context.byte_length,
            page_count=context.page_count,
            language=context.language or "unknown",
            text_length=context.text_length,
            has_images=context.has_images,
            has_tables=context.has_tables,
            has_links=context.has_links,
        )


class ExecutiveSummary(BaseModel):
    document_name: str
    audit_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    compliance_level: ComplianceLevel
    overall_score: int = Field(..., ge=0, le=100)
    total_issues: int
    total_fixes: int = Field(..., description="Fixes proposed across all analyzers")
    applied_fixes: int = Field(..., description="Fixes written back to the document")
    compliance_status: ComplianceStatus

    model_config = _FROZEN


class LevelCompliance(BaseModel):
    total: int
    passed: int
    failed: int

    model_config = _FROZEN


class AccessibilityFindings(BaseModel):
    issues_by_severity: Dict[str, List[Issue]]
    compliance_by_level: Dict[str, LevelCompliance]

    model_config = _FROZEN


class BeforeAfterComparison(BaseModel):
    before_score: int
    after_score: int
    improvement_percentage: int

    model_config = _FROZEN


class Improvements(BaseModel):
    fixes_by_kind: Dict[str, List[Fix]]
    before_after: BeforeAfterComparison

    model_config = _FROZEN


class AnalyzerPerformance(BaseModel):
    analyzer_name: str
    success: bool
    skipped: bool = False
    issues_found: int
    fixes_generated: int
    elapsed_ms: float
    error: Optional[str] = None

    model_config = _FROZEN

    @classmethod
    def from_envelope(cls, envelope: ResultEnvelope) -> "AnalyzerPerformance":
        return cls(
            analyzer_name=envelope.analyzer_name,
            success=envelope.success,
            skipped=envelope.skipped,
            issues_found=len(envelope.issues),
            fixes_generated=len(envelope.fixes),
            elapsed_ms=envelope.elapsed_ms,
            error=envelope.error,
        )


class Recommendations(BaseModel):
    immediate_actions: List[str] = Field(default_factory=list)
    long_term_improvements: List[str] = Field(default_factory=list)
    best_practices: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class AuditReport(BaseModel):
    """
    Final aggregate of one audit run.

    Constructed once by build_audit_report and never mutated.
    """

    rule_catalog_version: str = RULE_CATALOG_VERSION
    executive_summary: ExecutiveSummary
    document_analysis: DocumentInfo
    accessibility_findings: AccessibilityFindings
    improvements: Improvements
    analyzer_performance: List[AnalyzerPerformance] = Field(default_factory=list)
    recommendations: Recommendations
    export_formats: List[ExportFormat] = Field(
        default_factory=lambda: list(ExportFormat)
    )

    model_config = _FROZEN


class FixTally(BaseModel):
    applied: int = 0
    pending: int = 0

    model_config = _FROZEN


class SummaryReport(BaseModel):
    """
    Lightweight per-run summary, independent of document information.
    """

    summary: str
    issues_by_category: Dict[str, int]
    fixes: FixTally
    analyzer_performance: List[AnalyzerPerformance] = Field(default_factory=list)
    compliance_score: int = Field(..., ge=0, le=100)
    compliance_status: ComplianceStatus
    recommendations: List[str] = Field(default_factory=list)

    model_config = _FROZEN
