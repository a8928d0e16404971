"""
Report aggregation and export renderings.
"""

import csv
import io
import json

import pytest

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.reporting.audit_report import (
    build_audit_report,
    build_summary_report,
    compliance_by_level,
    group_issues_by_severity,
    improvement_percentage,
)
from a11y_audit.app.reporting.exporters import (
    CSV_HEADER,
    export,
    export_csv,
    export_html,
    export_json,
    export_markdown,
)
from a11y_audit.app.schemas.issues import (
    Fix,
    Issue,
    IssueCategory,
    ResultEnvelope,
    Severity,
)
from a11y_audit.app.schemas.report import (
    AuditReport,
    ComplianceStatus,
    DocumentInfo,
    ExportFormat,
)


ISSUES = [
    Issue(
        category=IssueCategory.LINK_TEXT,
        severity=Severity.HIGH,
        description='Found 1 links with generic text like "click here" or "read more"',
        rule_ids=["2.4.4", "2.4.9"],
        suggestion="Replace generic link text with descriptive text",
    ),
    Issue(
        category=IssueCategory.METADATA,
        severity=Severity.CRITICAL,
        description="PDF is not tagged for accessibility",
        rule_ids=["1.3.1"],
        suggestion="Enable accessibility tagging",
    ),
    Issue(
        category=IssueCategory.HEADING_STRUCTURE,
        severity=Severity.LOW,
        description="Found 1 duplicate headings",
        rule_ids=["2.4.6"],
    ),
]

FIXES = [
    Fix(
        kind="link_text_improvement",
        description="Improved generic link text",
        rule_ids=["2.4.4"],
        before_value="Click here",
        after_value="Download <annual> report",
    ),
]

ENVELOPES = [
    ResultEnvelope(
        analyzer_name="metadata_enhancer",
        success=True,
        issues=[ISSUES[1]],
    ),
    ResultEnvelope(
        analyzer_name="heading_structure",
        success=True,
        issues=[ISSUES[2]],
    ),
    ResultEnvelope(
        analyzer_name="link_text",
        success=True,
        issues=[ISSUES[0]],
        fixes=FIXES,
    ),
    ResultEnvelope(
        analyzer_name="table_accessibility",
        success=False,
        skipped=True,
        error="Analyzer 'table_accessibility' cannot process this document",
    ),
]

DOCUMENT = DocumentInfo(
    file_name="R&D <summary>.pdf",
    file_size=2048,
    page_count=3,
    language="en",
    text_length=900,
    has_links=True,
)


@pytest.fixture
def report() -> AuditReport:
    return build_audit_report(
        ENVELOPES,
        DOCUMENT,
        ComplianceLevel.AA,
        before_score=60,
        after_score=0,
    )


def test_issues_grouped_under_every_severity():
    grouped = group_issues_by_severity(ISSUES)
    assert list(grouped) == ["critical", "high", "medium", "low"]
    assert grouped["medium"] == []
    assert len(grouped["high"]) == 1


def test_compliance_partition_counts():
    table = compliance_by_level(ISSUES)
    assert table["A"].total == 5
    assert table["A"].failed == 2
    assert table["AA"].failed == 1
    assert table["AAA"].failed == 1
    assert table["AAA"].passed == 1


def test_improvement_percentage():
    assert improvement_percentage(50, 75) == 50
    assert improvement_percentage(60, 0) == -100
    assert improvement_percentage(0, 80) == 0
    # -12.5 rounds towards positive infinity.
    assert improvement_percentage(40, 35) == -12


def test_report_summary(report):
    summary = report.executive_summary
    assert summary.overall_score == 0
    assert summary.total_issues == 3
    assert summary.total_fixes == 1
    assert summary.applied_fixes == 0
    assert summary.compliance_status == ComplianceStatus.NON_COMPLIANT
    assert report.improvements.before_after.before_score == 60
    assert list(report.improvements.fixes_by_kind) == ["link_text_improvement"]
    assert [p.analyzer_name for p in report.analyzer_performance] == [
        "metadata_enhancer",
        "heading_structure",
        "link_text",
        "table_accessibility",
    ]


def test_immediate_actions_put_critical_first(report):
    assert report.recommendations.immediate_actions == [
        "Enable accessibility tagging",
        "Replace generic link text with descriptive text",
    ]
    assert report.recommendations.best_practices[-1] == (
        "Maintain AA compliance standards across all documents"
    )


def test_json_round_trip(report):
    rendered = export_json(report)
    restored = AuditReport.model_validate(json.loads(rendered))

    assert restored.executive_summary.overall_score == 0
    assert restored.accessibility_findings == report.accessibility_findings
    assert restored.improvements.fixes_by_kind == report.improvements.fixes_by_kind


def test_html_escapes_document_content(report):
    rendered = export_html(report)

    assert "<title>PDF Accessibility Audit Report</title>" in rendered
    assert "R&amp;D &lt;summary&gt;.pdf" in rendered
    assert "<summary>" not in rendered
    assert "color: red" in rendered
    assert "<td>Skipped</td>" in rendered


def test_markdown_sections(report):
    rendered = export_markdown(report)

    assert rendered.startswith("# PDF Accessibility Audit Report")
    assert "**Overall Score:** 0%" in rendered
    assert "- Pages: 3" in rendered
    assert "| link_text | Success | 1 | 1 |" in rendered
    assert "## Best Practices" in rendered


def test_csv_rows(report):
    rows = list(csv.reader(io.StringIO(export_csv(report))))

    assert tuple(rows[0]) == CSV_HEADER
    assert len(rows) == 1 + 3 + 1
    assert rows[1][1] == "critical"
    assert rows[-1] == [
        "link_text_improvement",
        "N/A",
        "Improved generic link text",
        "2.4.4",
        "Pending",
    ]


def test_export_dispatch(report):
    assert export(report, "markdown") == export_markdown(report)
    assert export(report, ExportFormat.CSV) == export_csv(report)
    with pytest.raises(ValueError):
        export(report, "docx")


def test_summary_report():
    summary = build_summary_report(ENVELOPES, ComplianceLevel.AA)

    assert summary.compliance_score == 0
    assert summary.compliance_status == ComplianceStatus.NON_COMPLIANT
    assert summary.issues_by_category == {
        "metadata": 1,
        "heading_structure": 1,
        "link_text": 1,
    }
    assert summary.fixes.pending == 1
    assert summary.fixes.applied == 0
    assert summary.summary.endswith("Compliance score: 0% for WCAG AA")
    assert "1 critical issues require immediate attention" in summary.recommendations
