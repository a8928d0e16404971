"""
Audit report exporters.

Pure renderings of an already-built AuditReport. Exporters never
compute anything the report does not already contain.
"""

from __future__ import annotations

import csv
import html
import io
import json
from typing import Any, Callable, Dict, List, Union

from a11y_audit.app.schemas.report import AuditReport, ExportFormat


def pretty_json(data: Any) -> str:
    """Pretty-print JSON for human-readable output."""
    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        indent=2,
        separators=(", ", ": "),
    )


def export_json(report: AuditReport) -> str:
    return pretty_json(report.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>PDF Accessibility Audit Report</title>
<style>
body {{ font-family: Arial, sans-serif; margin: 40px; }}
.score {{ font-size: 24px; font-weight: bold; color: {score_color}; }}
.section {{ margin: 20px 0; }}
</style>
</head>
<body>
<h1>PDF Accessibility Audit Report</h1>
<p>Document: {document}</p>
<p>Compliance Level: WCAG {level}</p>
<p>Overall Score: <span class="score">{score}%</span></p>
<p>Status: {status}</p>
<div class="section">
<h2>Executive Summary</h2>
<ul>
<li>Total Issues: {total_issues}</li>
<li>Total Fixes: {total_fixes}</li>
<li>Applied Fixes: {applied_fixes}</li>
<li>Audit Date: {audit_date}</li>
</ul>
</div>
<div class="section">
<h2>Immediate Actions Required</h2>
<ul>
{actions}
</ul>
</div>
<div class="section">
<h2>Analyzer Performance</h2>
<table>
<thead><tr><th scope="col">Analyzer</th><th scope="col">Status</th><th scope="col">Issues</th><th scope="col">Fixes</th></tr></thead>
<tbody>
{performance}
</tbody>
</table>
</div>
</body>
</html>
"""


def _status_label(success: bool, skipped: bool) -> str:
    if skipped:
        return "Skipped"
    return "Success" if success else "Failed"


def export_html(report: AuditReport) -> str:
    summary = report.executive_summary
    esc = html.escape

    actions = "\n".join(
        f"<li>{esc(action)}</li>"
        for action in report.recommendations.immediate_actions
    ) or "<li>None</li>"

    performance = "\n".join(
        "<tr>"
        f"<td>{esc(p.analyzer_name)}</td>"
        f"<td>{_status_label(p.success, p.skipped)}</td>"
        f"<td>{p.issues_found}</td>"
        f"<td>{p.fixes_generated}</td>"
        "</tr>"
        for p in report.analyzer_performance
    )

    return _HTML_TEMPLATE.format(
        document=esc(summary.document_name),
        level=esc(summary.compliance_level.value),
        score=summary.overall_score,
        score_color="green" if summary.overall_score >= 80 else "red",
        status=esc(summary.compliance_status.value.replace("_", " ").title()),
        total_issues=summary.total_issues,
        total_fixes=summary.total_fixes,
        applied_fixes=summary.applied_fixes,
        audit_date=esc(summary.audit_date.isoformat()),
        actions=actions,
        performance=performance,
    )


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

def _bullets(items: List[str]) -> List[str]:
    return [f"- {item}" for item in items] or ["- None"]


def export_markdown(report: AuditReport) -> str:
    summary = report.executive_summary
    document = report.document_analysis
    status = summary.compliance_status.value.replace("_", " ").title()

    lines = [
        "# PDF Accessibility Audit Report",
        "",
        f"**Document:** {summary.document_name}",
        f"**Compliance Level:** WCAG {summary.compliance_level.value}",
        f"**Overall Score:** {summary.overall_score}%",
        f"**Status:** {status}",
        "",
        "## Executive Summary",
        "",
        f"- Total Issues: {summary.total_issues}",
        f"- Total Fixes: {summary.total_fixes}",
        f"- Applied Fixes: {summary.applied_fixes}",
        f"- Audit Date: {summary.audit_date.isoformat()}",
        "",
        "## Document Analysis",
        "",
        f"- File Size: {document.file_size} bytes",
        f"- Pages: {document.page_count}",
        f"- Language: {document.language}",
        "",
        "## Immediate Actions Required",
        "",
        *_bullets(report.recommendations.immediate_actions),
        "",
        "## Analyzer Performance",
        "",
        "| Analyzer | Status | Issues | Fixes |",
        "| --- | --- | --- | --- |",
        *(
            f"| {p.analyzer_name} | {_status_label(p.success, p.skipped)} "
            f"| {p.issues_found} | {p.fixes_generated} |"
            for p in report.analyzer_performance
        ),
        "",
        "## Best Practices",
        "",
        *_bullets(report.recommendations.best_practices),
        "",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

CSV_HEADER = ("Category", "Severity", "Description", "WCAG Criteria", "Status")


def export_csv(report: AuditReport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for issues in report.accessibility_findings.issues_by_severity.values():
        for issue in issues:
            writer.writerow(
                (
                    issue.category.value,
                    issue.severity.value,
                    issue.description,
                    ";".join(issue.rule_ids),
                    "Issue",
                )
            )

    for kind, fixes in report.improvements.fixes_by_kind.items():
        for fix in fixes:
            writer.writerow(
                (
                    kind,
                    "N/A",
                    fix.description,
                    ";".join(fix.rule_ids),
                    "Fixed" if fix.applied else "Pending",
                )
            )

    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

EXPORTERS: Dict[ExportFormat, Callable[[AuditReport], str]] = {
    ExportFormat.JSON: export_json,
    ExportFormat.HTML: export_html,
    ExportFormat.MARKDOWN: export_markdown,
    ExportFormat.CSV: export_csv,
}


def export(report: AuditReport, format: Union[ExportFormat, str]) -> str:
    """
    Render the report. Raises ValueError for unsupported formats.
    """
    try:
        export_format = ExportFormat(format)
    except ValueError:
        raise ValueError(
            f"Unsupported export format '{format}'. "
            f"Supported: {[f.value for f in ExportFormat]}"
        ) from None
    return EXPORTERS[export_format](report)
