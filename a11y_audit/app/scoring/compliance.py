"""
Weighted compliance scoring.

Severity weights: critical 4, high 3, medium 2, low 1.

    max_score      = sum of weights over all issues
    achieved_score = min(max_score, 2 * applied_fixes)
    score          = round(100 * achieved_score / max_score), or 100
                     when there are no issues

Only the number of applied fixes restores points; the severity of the
issue a fix addresses does not matter. Kept as-is for compatibility
with existing reports.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Iterable, Mapping

from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import ResultEnvelope, Severity
from a11y_audit.app.schemas.report import ComplianceStatus


SEVERITY_WEIGHTS: Mapping[Severity, int] = MappingProxyType(
    {
        Severity.CRITICAL: 4,
        Severity.HIGH: 3,
        Severity.MEDIUM: 2,
        Severity.LOW: 1,
    }
)
POINTS_PER_APPLIED_FIX = 2

COMPLIANT_THRESHOLD = 90
PARTIAL_THRESHOLD = 70

UNDECLARED_LANGUAGES = frozenset({"unknown", "und"})


def round_half_up(value: float) -> int:
    """Round to the nearest integer; halves go towards positive infinity."""
    return math.floor(value + 0.5)


def score(envelopes: Iterable[ResultEnvelope]) -> int:
    max_score = 0
    applied = 0

    for envelope in envelopes:
        for issue in envelope.issues:
            max_score += SEVERITY_WEIGHTS[issue.severity]
        applied += sum(1 for fix in envelope.fixes if fix.applied)

    if max_score == 0:
        return 100

    achieved = min(max_score, max(0, POINTS_PER_APPLIED_FIX * applied))
    return round_half_up(100 * achieved / max_score)


def classify_compliance(compliance_score: int) -> ComplianceStatus:
    if compliance_score >= COMPLIANT_THRESHOLD:
        return ComplianceStatus.COMPLIANT
    if compliance_score >= PARTIAL_THRESHOLD:
        return ComplianceStatus.PARTIAL
    return ComplianceStatus.NON_COMPLIANT


def estimate_baseline_score(context: AnalysisContext) -> int:
    """
    Rough pre-remediation score from document features alone.

    Used as the "before" value when no earlier audit exists.
    """
    baseline = 50

    if context.language and context.language.lower() not in UNDECLARED_LANGUAGES:
        baseline += 10
    if context.page_count > 0:
        baseline += 10
    if context.text_length > 100:
        baseline += 10

    if context.has_images:
        baseline -= 15
    if context.has_tables:
        baseline -= 10
    if context.has_links:
        baseline -= 5

    return max(0, min(100, baseline))
