"""
Append-only execution log.

The only process-lifetime mutable state in the engine. It exists purely
for statistics and may be disabled without affecting results.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

import anyio

from a11y_audit.app.schemas.issues import ResultEnvelope
from a11y_audit.app.schemas.report import ExecutionStats


MOST_USED_LIMIT = 5


class ExecutionLog:
    def __init__(self) -> None:
        self._entries: List[ResultEnvelope] = []
        self._lock = anyio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Sequence[ResultEnvelope]:
        return tuple(self._entries)

    async def append(self, envelope: ResultEnvelope) -> None:
        async with self._lock:
            self._entries.append(envelope)

    def stats(self) -> ExecutionStats:
        entries = self.entries
        if not entries:
            return ExecutionStats()

        successes = sum(1 for e in entries if e.success)
        usage = Counter(e.analyzer_name for e in entries)

        return ExecutionStats(
            total_executions=len(entries),
            success_rate=round(successes / len(entries) * 100, 2),
            average_elapsed_ms=round(
                sum(e.elapsed_ms for e in entries) / len(entries), 3
            ),
            most_used=[name for name, _ in usage.most_common(MOST_USED_LIMIT)],
        )
