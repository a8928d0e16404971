from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Collection, List, Optional

from a11y_audit.app.events.models import AuditEvent
from a11y_audit.app.events.emitter import AuditEventEmitter

logger = logging.getLogger(__name__)


class MemoryQueueEventEmitter(AuditEventEmitter):
    """
    Queues one audit's events for a single SSE consumer.

    The queue closes itself after audit_completed or audit_failed, so a
    consumer iterating stream() always terminates.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[AuditEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: AuditEvent) -> None:
        if self._closed:
            return

        try:
            await self._queue.put(event)
        except Exception as exc:
            logger.warning("Dropping event %s: %s", event.event_type.value, exc)
            return

        if event.is_terminal:
            await self.close()

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._queue.put(None)

    async def stream(
        self,
        analyzers: Optional[Collection[str]] = None,
    ) -> AsyncIterator[AuditEvent]:
        """
        Yield queued events in emission order until the audit ends.

        With `analyzers`, events scoped to other analyzers are dropped;
        audit-level events (started, report ready, completed, failed)
        are always delivered.
        """
        while True:
            event = await self._queue.get()
            if event is None:
                break
            if analyzers is not None and event.analyzer_name not in (None, *analyzers):
                continue
            yield event

    async def drain(
        self,
        analyzers: Optional[Collection[str]] = None,
    ) -> List[AuditEvent]:
        """Collect every event up to the terminal one."""
        return [event async for event in self.stream(analyzers)]
