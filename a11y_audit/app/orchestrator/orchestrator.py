"""
Analyzer registry and execution orchestrator.

IMPORTANT:
The orchestrator does not inspect document content or interpret
issues. Its responsibilities are:
- holding the analyzer registry
- eligibility gating
- deterministic (priority) ordering of results
- per-analyzer failure isolation
- aggregating a run summary and feeding the execution log
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import anyio

from a11y_audit.app.analyzers import Analyzer, default_analyzers
from a11y_audit.app.analyzers.base import DEFAULT_FIX_TIMEOUT_SECONDS, elapsed_ms_since
from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.events import (
    AuditEventEmitter,
    AuditEventType,
    NullEventEmitter,
    emit_safely,
)
from a11y_audit.app.fixes.generator import FixGenerator
from a11y_audit.app.orchestrator.execution_log import ExecutionLog
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import AnalyzerDescriptor, ResultEnvelope
from a11y_audit.app.schemas.report import (
    Complexity,
    ExecutionResult,
    ExecutionStats,
    ExecutionSummary,
    RecommendationResult,
)

logger = logging.getLogger(__name__)


EXECUTION_PRIORITY: Mapping[str, int] = MappingProxyType(
    {
        "metadata_enhancer": 1,
        "heading_structure": 2,
        "image_alttext": 3,
        "table_accessibility": 4,
        "link_text": 5,
    }
)
UNKNOWN_PRIORITY = 999


def priority_order(names: Iterable[str]) -> List[str]:
    """Stable sort by the fixed priority table; unknown names last."""
    return sorted(names, key=lambda name: EXECUTION_PRIORITY.get(name, UNKNOWN_PRIORITY))


def estimate_complexity(selected_count: int, level: ComplianceLevel) -> Complexity:
    if level == ComplianceLevel.AAA or selected_count > 5:
        return Complexity.COMPLEX
    if level == ComplianceLevel.AA or selected_count > 3:
        return Complexity.MODERATE
    return Complexity.SIMPLE


class AnalysisOrchestrator:
    def __init__(
        self,
        analyzers: Optional[Iterable[Analyzer]] = None,
        *,
        concurrent: bool = True,
        execution_log: Optional[ExecutionLog] = None,
        fix_timeout_seconds: float = DEFAULT_FIX_TIMEOUT_SECONDS,
    ) -> None:
        self._registry: Dict[str, Analyzer] = {}
        self._concurrent = concurrent
        self._log = execution_log
        self._fix_timeout_seconds = fix_timeout_seconds

        for analyzer in analyzers or ():
            self.register(analyzer)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, analyzer: Analyzer) -> None:
        if analyzer.name in self._registry:
            raise ValueError(f"Analyzer '{analyzer.name}' is already registered")
        self._registry[analyzer.name] = analyzer

    def get(self, name: str) -> Optional[Analyzer]:
        return self._registry.get(name)

    @property
    def names(self) -> List[str]:
        return priority_order(self._registry)

    def describe_all(self) -> List[AnalyzerDescriptor]:
        return [self._registry[name].describe() for name in self.names]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def recommend(self, context: AnalysisContext) -> RecommendationResult:
        selected: List[str] = []
        reasons: List[str] = []

        for name in self.names:
            analyzer = self._registry[name]
            try:
                eligible = analyzer.eligible(context)
            except Exception:
                logger.exception("Eligibility check failed for %s", name)
                eligible = False
            if eligible:
                selected.append(name)
                reasons.append(analyzer.describe().description)

        return RecommendationResult(
            selected=selected,
            reasons=reasons,
            complexity=estimate_complexity(len(selected), context.compliance_level),
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        names: Iterable[str],
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator] = None,
        *,
        audit_id: Optional[str] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> ExecutionResult:
        """
        Run the named analyzers against one context.

        Every requested name yields exactly one envelope, in priority
        order. No analyzer failure halts the run.
        """
        emitter = emitter or NullEventEmitter()
        ordered = priority_order(names)
        started = time.perf_counter()
        slots: List[Optional[ResultEnvelope]] = [None] * len(ordered)

        async def run_slot(index: int, name: str) -> None:
            slots[index] = await self._execute_one(
                name,
                context,
                fix_generator,
                audit_id=audit_id,
                emitter=emitter,
            )

        if self._concurrent and len(ordered) > 1:
            async with anyio.create_task_group() as tg:
                for index, name in enumerate(ordered):
                    tg.start_soon(run_slot, index, name)
        else:
            for index, name in enumerate(ordered):
                await run_slot(index, name)

        envelopes = [envelope for envelope in slots if envelope is not None]

        if self._log is not None:
            for envelope in envelopes:
                await self._log.append(envelope)

        summary = ExecutionSummary(
            total_issues=sum(len(e.issues) for e in envelopes),
            total_fixes=sum(len(e.fixes) for e in envelopes),
            elapsed_ms=elapsed_ms_since(started),
            overall_success=all(e.success for e in envelopes),
        )

        logger.info(
            "Executed %s analyzers: %s issues, %s fixes, success=%s",
            len(envelopes),
            summary.total_issues,
            summary.total_fixes,
            summary.overall_success,
        )

        return ExecutionResult(envelopes=envelopes, summary=summary)

    def execute_sync(
        self,
        names: Iterable[str],
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator] = None,
    ) -> ExecutionResult:
        """Blocking convenience wrapper around execute()."""
        requested = list(names)

        async def _run() -> ExecutionResult:
            return await self.execute(requested, context, fix_generator)

        return anyio.run(_run)

    async def _execute_one(
        self,
        name: str,
        context: AnalysisContext,
        fix_generator: Optional[FixGenerator],
        *,
        audit_id: Optional[str],
        emitter: AuditEventEmitter,
    ) -> ResultEnvelope:
        analyzer = self._registry.get(name)
        if analyzer is None:
            logger.warning("Analyzer %s not registered", name)
            return ResultEnvelope(
                analyzer_name=name,
                success=False,
                error=f"Analyzer '{name}' not found",
            )

        started = time.perf_counter()

        try:
            eligible = analyzer.eligible(context)
        except Exception as exc:
            logger.exception("Eligibility check failed for %s", name)
            return ResultEnvelope(
                analyzer_name=name,
                success=False,
                elapsed_ms=elapsed_ms_since(started),
                error=str(exc) or exc.__class__.__name__,
            )

        if not eligible:
            logger.info("Analyzer %s skipped: document not eligible", name)
            await emit_safely(
                emitter,
                audit_id,
                AuditEventType.ANALYZER_SKIPPED,
                {"analyzer": name},
            )
            return ResultEnvelope(
                analyzer_name=name,
                success=False,
                skipped=True,
                elapsed_ms=elapsed_ms_since(started),
                error=f"Analyzer '{name}' cannot process this document",
            )

        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.ANALYZER_STARTED,
            {"analyzer": name},
        )

        try:
            envelope = await analyzer.run(
                context,
                fix_generator,
                fix_timeout_seconds=self._fix_timeout_seconds,
                audit_id=audit_id,
                emitter=emitter,
            )
        except Exception as exc:
            # Analyzers should never raise; third-party ones might.
            logger.exception("Analyzer %s raised out of run()", name)
            envelope = ResultEnvelope(
                analyzer_name=name,
                success=False,
                elapsed_ms=elapsed_ms_since(started),
                error=str(exc) or exc.__class__.__name__,
            )

        for issue in envelope.issues:
            await emit_safely(
                emitter,
                audit_id,
                AuditEventType.ISSUE_DISCOVERED,
                {
                    "analyzer": name,
                    "category": issue.category.value,
                    "severity": issue.severity.value,
                    "description": issue.description,
                },
            )

        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.ANALYZER_COMPLETED,
            {
                "analyzer": name,
                "success": envelope.success,
                "issues_count": len(envelope.issues),
                "fixes_count": len(envelope.fixes),
                "error": envelope.error,
            },
        )

        return envelope

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> ExecutionStats:
        if self._log is None:
            return ExecutionStats()
        return self._log.stats()


def build_default_orchestrator(config: A11yAuditConfig) -> AnalysisOrchestrator:
    """
    Composition root: all built-in analyzers, wired from configuration.
    """
    return AnalysisOrchestrator(
        default_analyzers(default_language=config.DEFAULT_LANGUAGE),
        concurrent=config.ENABLE_CONCURRENT_EXECUTION,
        execution_log=ExecutionLog() if config.ENABLE_EXECUTION_LOG else None,
        fix_timeout_seconds=config.FIX_GENERATION_TIMEOUT_SECONDS,
    )
