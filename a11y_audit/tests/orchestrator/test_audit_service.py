"""
End-to-end audit service.

Guarantees:
- extraction failures are the only fatal outcome and emit audit_failed
- a completed audit emits audit_completed carrying the report
- the overall score equals the after score
"""

import pytest

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.errors import ContextConstructionError, DocumentExtractionError
from a11y_audit.app.events import MemoryQueueEventEmitter
from a11y_audit.app.events.models import AuditEventType
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.app.orchestrator.audit_service import AccessibilityAuditService
from a11y_audit.app.schemas.report import ComplianceStatus
from a11y_audit.tests.fixtures.contexts import ListEmitter
from a11y_audit.tests.fixtures.pdf_factory import not_a_pdf, report_pdf

pytestmark = pytest.mark.anyio


def _service(**kwargs) -> AccessibilityAuditService:
    return AccessibilityAuditService(A11yAuditConfig(), **kwargs)


async def test_pdf_audit_produces_report_and_events():
    emitter = ListEmitter()
    report = await _service().run_audit(
        pdf_bytes=report_pdf(),
        file_name="annual-report.pdf",
        audit_id="audit-service-001",
        emitter=emitter,
    )

    summary = report.executive_summary
    assert summary.document_name == "annual-report.pdf"
    assert summary.compliance_level == ComplianceLevel.AA
    assert summary.total_issues > 0
    assert summary.overall_score == report.improvements.before_after.after_score
    assert summary.compliance_status == ComplianceStatus.NON_COMPLIANT

    names = [p.analyzer_name for p in report.analyzer_performance]
    assert names[0] == "metadata_enhancer"
    assert "table_accessibility" in names
    assert "image_alttext" in names

    types = emitter.types()
    assert types[0] == AuditEventType.AUDIT_STARTED.value
    assert types[-2] == AuditEventType.AUDIT_REPORT_READY.value
    assert types[-1] == AuditEventType.AUDIT_COMPLETED.value
    assert all(e.audit_id == "audit-service-001" for e in emitter.events)

    completed = emitter.events[-1]
    assert completed.details["report"]["executive_summary"]["overall_score"] == (
        summary.overall_score
    )


async def test_invalid_pdf_is_fatal_and_reported():
    emitter = ListEmitter()

    with pytest.raises(DocumentExtractionError):
        await _service().run_audit(
            pdf_bytes=not_a_pdf(),
            audit_id="audit-service-002",
            emitter=emitter,
        )

    assert emitter.types() == ["audit_started", "audit_failed"]
    assert emitter.events[-1].details["reason"] == "invalid_file"


async def test_unknown_compliance_level_is_fatal():
    with pytest.raises(ContextConstructionError):
        await _service().analyze_text("Some text", compliance_level="AAAA")


async def test_text_audit_with_heuristic_fixes():
    report = await _service(fix_generator=HeuristicFixGenerator()).analyze_text(
        "Click here to download the report.\nContact help@example.org.",
        file_name="doc.pdf",
        compliance_level="AAA",
    )

    assert report.executive_summary.compliance_level == ComplianceLevel.AAA
    assert report.executive_summary.total_fixes > 0
    # Proposed fixes are never applied, so they restore no points.
    assert report.executive_summary.applied_fixes == 0
    assert report.executive_summary.overall_score == 0
    assert "link_text_improvement" in report.improvements.fixes_by_kind


async def test_memory_queue_emitter_closes_on_completion():
    emitter = MemoryQueueEventEmitter()
    await _service().analyze_text(
        "Plain body text without any structure.",
        audit_id="audit-service-003",
        emitter=emitter,
    )

    events = await emitter.drain()
    assert emitter.closed is True
    assert events[-1].event_type == AuditEventType.AUDIT_COMPLETED
    assert events[-1].to_sse_payload().startswith("event: audit_completed\ndata: ")


async def test_execution_log_backs_stats():
    service = _service()
    await service.analyze_text("Contact help@example.org for details.")
    stats = service.stats()

    assert stats.total_executions >= 2
    assert "metadata_enhancer" in stats.most_used


async def test_summary_report_matches_full_report():
    emitter = ListEmitter()
    summary = await _service().run_summary(
        pdf_bytes=report_pdf(),
        file_name="annual-report.pdf",
        audit_id="audit-service-004",
        emitter=emitter,
    )

    ready = next(
        e for e in emitter.events
        if e.event_type == AuditEventType.AUDIT_REPORT_READY
    )
    completed = emitter.events[-1].details["report"]

    assert summary.compliance_score == ready.details["overall_score"]
    assert summary.compliance_score == completed["executive_summary"]["overall_score"]
    assert ready.details["summary"]["compliance_score"] == summary.compliance_score
    assert summary.summary.endswith(f"{summary.compliance_score}% for WCAG AA")
    assert [p.analyzer_name for p in summary.analyzer_performance] == [
        p["analyzer_name"] for p in completed["analyzer_performance"]
    ]
