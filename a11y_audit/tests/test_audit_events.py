"""
Audit event stream.

Events are observational: a broken sink never raises into the audit,
and filtering a stream by analyzer never hides audit-level events.
"""

import pytest

from a11y_audit.app.events import (
    AuditEvent,
    AuditEventType,
    MemoryQueueEventEmitter,
    emit_safely,
)
from a11y_audit.tests.fixtures.contexts import ExplodingEmitter, ListEmitter

pytestmark = pytest.mark.anyio


def _event(event_type: AuditEventType, analyzer=None) -> AuditEvent:
    details = {"analyzer": analyzer} if analyzer else None
    return AuditEvent(audit_id="audit-events-001", event_type=event_type, details=details)


def test_event_scope_and_terminality():
    started = _event(AuditEventType.AUDIT_STARTED)
    analyzer_done = _event(AuditEventType.ANALYZER_COMPLETED, "link_text")

    assert started.analyzer_name is None
    assert analyzer_done.analyzer_name == "link_text"
    assert analyzer_done.is_terminal is False
    assert _event(AuditEventType.AUDIT_FAILED).is_terminal is True
    assert _event(AuditEventType.AUDIT_COMPLETED).is_terminal is True


async def test_emit_safely_swallows_sink_failures():
    await emit_safely(
        ExplodingEmitter(), "audit-events-002", AuditEventType.AUDIT_STARTED, {}
    )


async def test_emit_safely_needs_an_audit_id():
    emitter = ListEmitter()
    await emit_safely(emitter, None, AuditEventType.AUDIT_STARTED, {})
    await emit_safely(emitter, "audit-events-003", AuditEventType.AUDIT_STARTED, {})

    assert emitter.types() == ["audit_started"]


async def test_stream_filters_analyzer_events():
    emitter = MemoryQueueEventEmitter()
    for event in (
        _event(AuditEventType.AUDIT_STARTED),
        _event(AuditEventType.ANALYZER_STARTED, "metadata_enhancer"),
        _event(AuditEventType.ANALYZER_STARTED, "link_text"),
        _event(AuditEventType.ISSUE_DISCOVERED, "link_text"),
        _event(AuditEventType.ANALYZER_COMPLETED, "metadata_enhancer"),
        _event(AuditEventType.AUDIT_COMPLETED),
    ):
        await emitter.emit(event)

    events = await emitter.drain(analyzers={"link_text"})

    assert [(e.event_type.value, e.analyzer_name) for e in events] == [
        ("audit_started", None),
        ("analyzer_started", "link_text"),
        ("issue_discovered", "link_text"),
        ("audit_completed", None),
    ]


async def test_queue_ignores_events_after_terminal():
    emitter = MemoryQueueEventEmitter()
    await emitter.emit(_event(AuditEventType.AUDIT_FAILED))
    await emitter.emit(_event(AuditEventType.ANALYZER_STARTED, "link_text"))

    assert emitter.closed is True
    assert [e.event_type for e in await emitter.drain()] == [AuditEventType.AUDIT_FAILED]
