"""
Fix generator doubles for analyzer and orchestrator tests.

None of these touch the network. Each one exercises one of the
outcomes an analyzer must tolerate: text, exception, hang, empty.
"""

from __future__ import annotations

import anyio

from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext


class StaticFixGenerator:
    def __init__(self, text: str = "Proposed remedy") -> None:
        self._text = text

    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        return f"{self._text} ({request.kind})"


class FailingFixGenerator:
    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        raise RuntimeError("model backend unavailable")


class HangingFixGenerator:
    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        await anyio.sleep(60)
        return "too late"


class EmptyFixGenerator:
    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        return "   "


class RecordingFixGenerator:
    """Returns canned text and keeps every request it was given."""

    def __init__(self) -> None:
        self.requests: list[FixRequest] = []

    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        self.requests.append(request)
        return f"remedy for {request.kind}"

    @property
    def kinds(self) -> list[str]:
        return [request.kind for request in self.requests]
