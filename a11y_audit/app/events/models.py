from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# ----------------------------------------------------------------------
# Event Types (Finite and Versioned)
# ----------------------------------------------------------------------
class AuditEventType(str, Enum):
    """
    Progression events emitted during an accessibility audit.

    NOTE:
    This enum is finite and versioned.
    New entries must preserve observational semantics.
    """

    # ------------------------------------------------------------------
    # Global Audit Lifecycle
    # ------------------------------------------------------------------
    AUDIT_STARTED = "audit_started"
    AUDIT_COMPLETED = "audit_completed"
    AUDIT_FAILED = "audit_failed"

    # ------------------------------------------------------------------
    # Analyzer Execution
    # ------------------------------------------------------------------
    ANALYZER_STARTED = "analyzer_started"
    ANALYZER_COMPLETED = "analyzer_completed"
    ANALYZER_SKIPPED = "analyzer_skipped"
    ISSUE_DISCOVERED = "issue_discovered"

    # ------------------------------------------------------------------
    # Fix Generation (Observational, Non-Authoritative)
    # ------------------------------------------------------------------
    FIX_GENERATED = "fix_generated"
    FIX_GENERATION_FAILED = "fix_generation_failed"

    # ------------------------------------------------------------------
    # Presentation / Streaming Only (Non-terminal)
    # ------------------------------------------------------------------
    AUDIT_REPORT_READY = "audit_report_ready"


# ----------------------------------------------------------------------
# Event Model
# ----------------------------------------------------------------------
class AuditEvent(BaseModel):
    """
    An immutable observation of a step in an audit run.

    Events are observational and transport-agnostic. They never carry
    authority over the report.
    """

    event_id: UUID = Field(default_factory=uuid4)
    audit_id: str = Field(..., description="The global audit identifier")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: AuditEventType

    # Optional contextual metadata (analyzer name, counts, etc.)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def analyzer_name(self) -> Optional[str]:
        """Analyzer this event belongs to; None for audit-level events."""
        if not self.details:
            return None
        return self.details.get("analyzer")

    @property
    def is_terminal(self) -> bool:
        return self.event_type in TERMINAL_EVENTS

    def to_sse_payload(self) -> str:
        """Frame the event as one Server-Sent Events message."""
        data = json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
        return f"event: {self.event_type.value}\ndata: {data}\n\n"


TERMINAL_EVENTS = frozenset(
    {
        AuditEventType.AUDIT_COMPLETED,
        AuditEventType.AUDIT_FAILED,
    }
)
