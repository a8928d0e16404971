from __future__ import annotations

from typing import Optional

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.events.models import AuditEvent
from a11y_audit.app.schemas.context import AnalysisContext, DocumentMetadata


HEADING_SCENARIO = (
    "1. Introduction\n\nThis is text.\n\n1.1 Background\n\nMore text.\n\n"
    "1.1.1 Details\n"
)

SKIP_SCENARIO = "1. Introduction\n\nText here.\n\n1.1.1 Deep detail\n"

LINK_SCENARIO = "Click here to download the report."

TABLE_SCENARIO = "Name | Value | %\nA | 1 | 10%\nB | 2 | 20%"

FILLER_SENTENCE = (
    "The programme reviewed every public document against the agreed "
    "accessibility criteria and recorded the outcome for each one.\n"
)


def padded(text: str, minimum: int = 600) -> str:
    """Append body sentences until text is longer than minimum."""
    while len(text) <= minimum:
        text += FILLER_SENTENCE
    return text


def make_context(
    text: str = "",
    *,
    page_count: int = 1,
    has_images: bool = False,
    has_tables: bool = False,
    has_links: bool = False,
    language: str = "en",
    compliance_level: ComplianceLevel = ComplianceLevel.AA,
    file_name: str = "quarterly-review.pdf",
    metadata: Optional[DocumentMetadata] = None,
) -> AnalysisContext:
    return AnalysisContext(
        text=text,
        page_count=page_count,
        byte_length=len(text.encode("utf-8")),
        has_images=has_images,
        has_tables=has_tables,
        has_links=has_links,
        language=language,
        compliance_level=compliance_level,
        file_name=file_name,
        metadata=metadata,
    )


class ListEmitter:
    """Collects events in memory for assertions."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def emit(self, event: AuditEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class ExplodingEmitter:
    """Emitter whose every call fails; results must not change."""

    async def emit(self, event: AuditEvent) -> None:
        raise RuntimeError("event sink unavailable")
