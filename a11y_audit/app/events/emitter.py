from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from a11y_audit.app.events.models import AuditEvent, AuditEventType

logger = logging.getLogger(__name__)


class AuditEventEmitter(Protocol):
    """
    Sink for audit progress: audit lifecycle, analyzer runs and fix
    generation. Analyzer-scoped events carry the analyzer name under
    details["analyzer"].
    """

    async def emit(self, event: AuditEvent) -> None:
        ...


class NullEventEmitter:
    """Discards every event. Default when nobody observes the audit."""

    async def emit(self, event: AuditEvent) -> None:
        return


async def emit_safely(
    emitter: AuditEventEmitter,
    audit_id: Optional[str],
    event_type: AuditEventType,
    details: Dict[str, Any],
) -> None:
    """
    Build and emit one event, logging instead of raising on failure.

    Runs without an audit_id (direct analyzer or orchestrator calls)
    emit nothing.
    """
    if audit_id is None:
        return
    try:
        await emitter.emit(
            AuditEvent(audit_id=audit_id, event_type=event_type, details=details)
        )
    except Exception as exc:
        logger.warning("Dropping %s event for audit %s: %s", event_type.value, audit_id, exc)
