"""
Fix generator interface.

A fix generator turns one FixRequest into proposed remedy text. It is
an optional, external collaborator: analyzers must produce identical
issues with or without one, and any generator failure degrades to
"no fix for this issue".
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue


class FixRequest(BaseModel):
    """
    Everything a generator needs to propose one remedy.

    subject is the piece of content being remedied (link text, heading
    list, table sample, ...). hints carries analyzer-specific facts such
    as link type, table dimensions or surrounding context.
    """

    analyzer_name: str
    kind: str = Field(..., description="Fix kind, e.g. 'link_text_improvement'")
    issue: Optional[Issue] = None
    subject: str = ""
    hints: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")


@runtime_checkable
class FixGenerator(Protocol):
    async def generate(
        self,
        request: FixRequest,
        context: AnalysisContext,
    ) -> str:
        """
        Return proposed remedy text.

        Empty or whitespace-only output means no fix is proposed.
        Implementations may raise; callers treat that as no fix.
        """
        ...
