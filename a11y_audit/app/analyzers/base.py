"""
Common analyzer contract.

Each analyzer infers one structural dimension from extracted text:

    eligible(context)  cheap, side-effect free gate
    describe()         name and rule identifiers it can raise
    run(context, fix_generator)  issues + optional fixes, never raises

Subclasses implement the pure parts (analyze, identify_issues,
plan_fixes). BaseAnalyzer.run owns timing, failure isolation and the
best-effort fix enrichment pass.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import (
    Any,
    ClassVar,
    Iterable,
    List,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

import anyio
from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.events import (
    AuditEventEmitter,
    AuditEventType,
    NullEventEmitter,
    emit_safely,
)
from a11y_audit.app.fixes.generator import FixGenerator, FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import (
    AnalyzerDescriptor,
    Fix,
    Issue,
    ResultEnvelope,
)

logger = logging.getLogger(__name__)


DEFAULT_FIX_TIMEOUT_SECONDS = 15.0


# ----------------------------------------------------------------------
# Analyzer interface (pluggable)
# ----------------------------------------------------------------------

@runtime_checkable
class Analyzer(Protocol):
    name: str

    def eligible(self, context: AnalysisContext) -> bool:
        ...

    def describe(self) -> AnalyzerDescriptor:
        ...

    async def run(
        self,
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator] = None,
        *,
        fix_timeout_seconds: float = DEFAULT_FIX_TIMEOUT_SECONDS,
        audit_id: Optional[str] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> ResultEnvelope:
        ...


class FixPlan(BaseModel):
    """
    A fix the analyzer wants to propose, minus the generated text.
    """

    request: FixRequest
    description: str
    rule_ids: List[str] = Field(default_factory=list)
    before_value: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


def elapsed_ms_since(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 3)


# ----------------------------------------------------------------------
# Base implementation
# ----------------------------------------------------------------------

class BaseAnalyzer(ABC):
    name: ClassVar[str]
    description: ClassVar[str]
    rule_ids: ClassVar[Tuple[str, ...]]

    def describe(self) -> AnalyzerDescriptor:
        return AnalyzerDescriptor(
            name=self.name,
            description=self.description,
            rule_ids=list(self.rule_ids),
        )

    @abstractmethod
    def eligible(self, context: AnalysisContext) -> bool:
        ...

    @abstractmethod
    def analyze(self, context: AnalysisContext) -> Any:
        """Pure structural inference over the context text."""

    @abstractmethod
    def identify_issues(
        self,
        analysis: Any,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        ...

    def plan_fixes(
        self,
        analysis: Any,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        return ()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(
        self,
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator] = None,
        *,
        fix_timeout_seconds: float = DEFAULT_FIX_TIMEOUT_SECONDS,
        audit_id: Optional[str] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> ResultEnvelope:
        """
        Analyze the context and, if a generator is supplied, propose fixes.

        Never raises. Internal errors produce success=False with whatever
        issues and fixes were gathered before the failure.
        """
        emitter = emitter or NullEventEmitter()
        started = time.perf_counter()
        issues: List[Issue] = []
        fixes: List[Fix] = []

        try:
            analysis = self.analyze(context)

            for issue in self.identify_issues(analysis, context):
                issues.append(issue)

            if fix_generator is not None and issues:
                for plan in self.plan_fixes(analysis, issues, context):
                    fix = await self._generate_fix(
                        plan,
                        fix_generator,
                        context,
                        timeout_seconds=fix_timeout_seconds,
                        audit_id=audit_id,
                        emitter=emitter,
                    )
                    if fix is not None:
                        fixes.append(fix)

        except Exception as exc:
            logger.exception("Analyzer %s failed", self.name)
            return ResultEnvelope(
                analyzer_name=self.name,
                success=False,
                issues=issues,
                fixes=fixes,
                elapsed_ms=elapsed_ms_since(started),
                error=str(exc) or exc.__class__.__name__,
            )

        logger.debug(
            "Analyzer %s found %s issues, proposed %s fixes",
            self.name,
            len(issues),
            len(fixes),
        )

        return ResultEnvelope(
            analyzer_name=self.name,
            success=True,
            issues=issues,
            fixes=fixes,
            elapsed_ms=elapsed_ms_since(started),
        )

    def run_sync(
        self,
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator] = None,
    ) -> ResultEnvelope:
        """Blocking convenience wrapper around run()."""

        async def _run() -> ResultEnvelope:
            return await self.run(context, fix_generator)

        return anyio.run(_run)

    async def _generate_fix(
        self,
        plan: FixPlan,
        fix_generator: FixGenerator,
        context: AnalysisContext,
        *,
        timeout_seconds: float,
        audit_id: Optional[str],
        emitter: AuditEventEmitter,
    ) -> Optional[Fix]:
        """
        Bounded, best-effort enrichment of a single planned fix.

        Timeouts, generator errors and empty output all yield None.
        """
        failure: Optional[str] = None
        text = ""

        try:
            with anyio.fail_after(timeout_seconds):
                text = await fix_generator.generate(plan.request, context)
        except TimeoutError:
            failure = f"timed out after {timeout_seconds}s"
        except Exception as exc:
            failure = str(exc) or exc.__class__.__name__

        if failure is None and not (text or "").strip():
            failure = "empty output"

        if failure is not None:
            logger.warning(
                "No %s fix from %s: %s",
                plan.request.kind,
                self.name,
                failure,
            )
            await emit_safely(
                emitter,
                audit_id,
                AuditEventType.FIX_GENERATION_FAILED,
                {"analyzer": self.name, "kind": plan.request.kind, "reason": failure},
            )
            return None

        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.FIX_GENERATED,
            {"analyzer": self.name, "kind": plan.request.kind},
        )

        return Fix(
            kind=plan.request.kind,
            description=plan.description,
            applied=False,
            rule_ids=plan.rule_ids,
            before_value=plan.before_value,
            after_value=text.strip(),
        )
