"""
Audit report aggregation.

Pure functions that fold a run's result envelopes into the read-only
AuditReport and SummaryReport models. No I/O, no analysis.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List

from a11y_audit.app.catalog import COMPLIANCE_PARTITION, ComplianceLevel
from a11y_audit.app.schemas.issues import Fix, Issue, ResultEnvelope, Severity
from a11y_audit.app.schemas.report import (
    AccessibilityFindings,
    AnalyzerPerformance,
    AuditReport,
    BeforeAfterComparison,
    DocumentInfo,
    ExecutiveSummary,
    FixTally,
    Improvements,
    LevelCompliance,
    Recommendations,
    SummaryReport,
)
from a11y_audit.app.scoring.compliance import (
    classify_compliance,
    round_half_up,
    score,
)


HIGH_PRIORITY_ACTIONS = 3

LONG_TERM_IMPROVEMENTS = (
    "Implement accessibility testing in development workflow",
    "Train content creators on WCAG guidelines",
    "Regular accessibility audits for all documents",
)

BEST_PRACTICES = (
    "Use semantic HTML structure in source documents",
    "Provide meaningful alt-text for all images",
    "Ensure proper heading hierarchy",
    "Test with screen readers and assistive technologies",
)


def _all_issues(envelopes: List[ResultEnvelope]) -> List[Issue]:
    return [issue for envelope in envelopes for issue in envelope.issues]


def _all_fixes(envelopes: List[ResultEnvelope]) -> List[Fix]:
    return [fix for envelope in envelopes for fix in envelope.fixes]


def group_issues_by_severity(issues: Iterable[Issue]) -> Dict[str, List[Issue]]:
    grouped: Dict[str, List[Issue]] = {severity.value: [] for severity in Severity}
    for issue in issues:
        grouped[issue.severity.value].append(issue)
    return grouped


def compliance_by_level(issues: Iterable[Issue]) -> Dict[str, LevelCompliance]:
    violated = {rule_id for issue in issues for rule_id in issue.rule_ids}
    table: Dict[str, LevelCompliance] = {}
    for level in ComplianceLevel:
        rules = COMPLIANCE_PARTITION[level]
        failed = len(rules & violated)
        table[level.value] = LevelCompliance(
            total=len(rules),
            passed=len(rules) - failed,
            failed=failed,
        )
    return table


def group_fixes_by_kind(fixes: Iterable[Fix]) -> Dict[str, List[Fix]]:
    grouped: Dict[str, List[Fix]] = {}
    for fix in fixes:
        grouped.setdefault(fix.kind, []).append(fix)
    return grouped


def improvement_percentage(before_score: int, after_score: int) -> int:
    if before_score <= 0:
        return 0
    return round_half_up(100 * (after_score - before_score) / before_score)


def build_recommendations(issues: List[Issue], level: ComplianceLevel) -> Recommendations:
    critical = [i.suggestion for i in issues if i.severity == Severity.CRITICAL and i.suggestion]
    high = [i.suggestion for i in issues if i.severity == Severity.HIGH and i.suggestion]

    return Recommendations(
        immediate_actions=critical + high[:HIGH_PRIORITY_ACTIONS],
        long_term_improvements=list(LONG_TERM_IMPROVEMENTS),
        best_practices=[
            *BEST_PRACTICES,
            f"Maintain {level.value} compliance standards across all documents",
        ],
    )


def build_audit_report(
    envelopes: Iterable[ResultEnvelope],
    document_info: DocumentInfo,
    level: ComplianceLevel,
    before_score: int,
    after_score: int,
) -> AuditReport:
    """
    Fold one run into an AuditReport.

    overall_score is after_score as given; the caller decides where the
    before/after scores come from.
    """
    envelopes = list(envelopes)
    issues = _all_issues(envelopes)
    fixes = _all_fixes(envelopes)

    return AuditReport(
        executive_summary=ExecutiveSummary(
            document_name=document_info.file_name,
            compliance_level=level,
            overall_score=after_score,
            total_issues=len(issues),
            total_fixes=len(fixes),
            applied_fixes=sum(1 for fix in fixes if fix.applied),
            compliance_status=classify_compliance(after_score),
        ),
        document_analysis=document_info,
        accessibility_findings=AccessibilityFindings(
            issues_by_severity=group_issues_by_severity(issues),
            compliance_by_level=compliance_by_level(issues),
        ),
        improvements=Improvements(
            fixes_by_kind=group_fixes_by_kind(fixes),
            before_after=BeforeAfterComparison(
                before_score=before_score,
                after_score=after_score,
                improvement_percentage=improvement_percentage(before_score, after_score),
            ),
        ),
        analyzer_performance=[
            AnalyzerPerformance.from_envelope(envelope) for envelope in envelopes
        ],
        recommendations=build_recommendations(issues, level),
    )


def build_summary_report(
    envelopes: Iterable[ResultEnvelope],
    level: ComplianceLevel,
) -> SummaryReport:
    envelopes = list(envelopes)
    issues = _all_issues(envelopes)
    fixes = _all_fixes(envelopes)
    compliance_score = score(envelopes)

    applied = sum(1 for fix in fixes if fix.applied)
    severities = Counter(issue.severity for issue in issues)

    recommendations = [
        f"{len(issues)} accessibility issues identified across "
        f"{len(envelopes)} analysis tools",
        f"{applied} improvements successfully applied",
        f"Target WCAG {level.value} compliance level",
    ]
    if severities[Severity.CRITICAL]:
        recommendations.append(
            f"{severities[Severity.CRITICAL]} critical issues require immediate attention"
        )
    if severities[Severity.HIGH]:
        recommendations.append(
            f"{severities[Severity.HIGH]} high-priority issues should be addressed soon"
        )

    return SummaryReport(
        summary=(
            "Accessibility analysis complete. Compliance score: "
            f"{compliance_score}% for WCAG {level.value}"
        ),
        issues_by_category=dict(Counter(issue.category.value for issue in issues)),
        fixes=FixTally(applied=applied, pending=len(fixes) - applied),
        analyzer_performance=[
            AnalyzerPerformance.from_envelope(envelope) for envelope in envelopes
        ],
        compliance_score=compliance_score,
        compliance_status=classify_compliance(compliance_score),
        recommendations=recommendations,
    )
