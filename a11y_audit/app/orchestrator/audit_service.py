"""
End-to-end accessibility audit service.

Execution order:
    1. Extraction and context construction (the only fatal stage)
    2. Analyzer selection (recommend)
    3. Analyzer execution (isolated, priority ordered)
    4. Scoring and report construction

The emitter is strictly observational: failures to emit never affect
execution, and events never influence control flow.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union
from uuid import uuid4

import anyio
import anyio.to_thread

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.errors import ContextConstructionError, DocumentExtractionError
from a11y_audit.app.events import (
    AuditEventEmitter,
    AuditEventType,
    NullEventEmitter,
    emit_safely,
)
from a11y_audit.app.extraction.context_builder import (
    build_analysis_context,
    extracted_from_text,
)
from a11y_audit.app.extraction.pdf_text import PdfTextExtractionProvider
from a11y_audit.app.fixes.factory import build_fix_generator
from a11y_audit.app.fixes.generator import FixGenerator
from a11y_audit.app.orchestrator.orchestrator import (
    AnalysisOrchestrator,
    build_default_orchestrator,
)
from a11y_audit.app.reporting.audit_report import build_audit_report, build_summary_report
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import AnalyzerDescriptor
from a11y_audit.app.schemas.report import (
    AuditReport,
    DocumentInfo,
    ExecutionStats,
    SummaryReport,
)
from a11y_audit.app.scoring.compliance import estimate_baseline_score, score

logger = logging.getLogger(__name__)


class AccessibilityAuditService:
    def __init__(
        self,
        config: A11yAuditConfig,
        orchestrator: Optional[AnalysisOrchestrator] = None,
        extractor: Optional[PdfTextExtractionProvider] = None,
        fix_generator: Optional[FixGenerator] = None,
    ) -> None:
        """
        Direct constructor.

        Intended for tests and explicit wiring. No fix generator is
        constructed implicitly; use from_config for that.
        """
        self._config = config
        self._orchestrator = orchestrator or build_default_orchestrator(config)
        self._extractor = extractor or PdfTextExtractionProvider.from_config(config)
        self._fix_generator = fix_generator

    @classmethod
    def from_config(cls, config: A11yAuditConfig) -> "AccessibilityAuditService":
        """Composition root: everything wired from runtime configuration."""
        return cls(
            config=config,
            orchestrator=build_default_orchestrator(config),
            extractor=PdfTextExtractionProvider.from_config(config),
            fix_generator=build_fix_generator(config),
        )

    @property
    def orchestrator(self) -> AnalysisOrchestrator:
        return self._orchestrator

    def describe_analyzers(self) -> List[AnalyzerDescriptor]:
        return self._orchestrator.describe_all()

    def stats(self) -> ExecutionStats:
        return self._orchestrator.stats()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run_audit(
        self,
        *,
        pdf_bytes: bytes,
        file_name: str = "document.pdf",
        audit_id: Optional[str] = None,
        compliance_level: Union[ComplianceLevel, str, None] = None,
        language: Optional[str] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> AuditReport:
        """
        Audit a PDF document.

        Raises ContextConstructionError (including DocumentExtractionError)
        when no AnalysisContext can be built. Nothing else is fatal.
        """
        emitter = emitter or NullEventEmitter()
        audit_id = audit_id or str(uuid4())

        context = await self._pdf_context(
            pdf_bytes, file_name, audit_id, compliance_level, language, emitter
        )
        report, _ = await self._audit_context(context, audit_id=audit_id, emitter=emitter)
        return report

    async def run_summary(
        self,
        *,
        pdf_bytes: bytes,
        file_name: str = "document.pdf",
        audit_id: Optional[str] = None,
        compliance_level: Union[ComplianceLevel, str, None] = None,
        language: Optional[str] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> SummaryReport:
        """Same audit as run_audit, returning the lightweight SummaryReport."""
        emitter = emitter or NullEventEmitter()
        audit_id = audit_id or str(uuid4())

        context = await self._pdf_context(
            pdf_bytes, file_name, audit_id, compliance_level, language, emitter
        )
        _, summary = await self._audit_context(context, audit_id=audit_id, emitter=emitter)
        return summary

    async def analyze_text(
        self,
        text: str,
        *,
        file_name: str = "document.pdf",
        audit_id: Optional[str] = None,
        compliance_level: Union[ComplianceLevel, str, None] = None,
        language: Optional[str] = None,
        page_count: Optional[int] = None,
        emitter: Optional[AuditEventEmitter] = None,
    ) -> AuditReport:
        """Audit pre-extracted text, skipping PDF extraction."""
        emitter = emitter or NullEventEmitter()
        audit_id = audit_id or str(uuid4())

        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.AUDIT_STARTED,
            {"file_name": file_name, "text_length": len(text)},
        )

        try:
            context = build_analysis_context(
                extracted_from_text(text, page_count=page_count),
                file_name=file_name,
                compliance_level=compliance_level,
                language=language,
                default_language=self._config.DEFAULT_LANGUAGE,
                default_level=self._config.DEFAULT_COMPLIANCE_LEVEL,
            )
        except ContextConstructionError as exc:
            await self._fail(emitter, audit_id, exc)
            raise

        report, _ = await self._audit_context(context, audit_id=audit_id, emitter=emitter)
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _pdf_context(
        self,
        pdf_bytes: bytes,
        file_name: str,
        audit_id: str,
        compliance_level: Union[ComplianceLevel, str, None],
        language: Optional[str],
        emitter: AuditEventEmitter,
    ) -> AnalysisContext:
        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.AUDIT_STARTED,
            {"file_name": file_name, "byte_length": len(pdf_bytes)},
        )

        try:
            extracted = await anyio.to_thread.run_sync(
                self._extractor.extract, pdf_bytes
            )
            return build_analysis_context(
                extracted,
                file_name=file_name,
                compliance_level=compliance_level,
                language=language,
                default_language=self._config.DEFAULT_LANGUAGE,
                default_level=self._config.DEFAULT_COMPLIANCE_LEVEL,
            )
        except ContextConstructionError as exc:
            await self._fail(emitter, audit_id, exc)
            raise

    async def _audit_context(
        self,
        context: AnalysisContext,
        *,
        audit_id: str,
        emitter: AuditEventEmitter,
    ) -> Tuple[AuditReport, SummaryReport]:
        try:
            recommendation = self._orchestrator.recommend(context)
            logger.info(
                "Audit %s: running %s (complexity=%s)",
                audit_id,
                recommendation.selected,
                recommendation.complexity.value,
            )

            result = await self._orchestrator.execute(
                recommendation.selected,
                context,
                self._fix_generator,
                audit_id=audit_id,
                emitter=emitter,
            )

            before_score = estimate_baseline_score(context)
            after_score = score(result.envelopes)

            report = build_audit_report(
                result.envelopes,
                DocumentInfo.from_context(context),
                context.compliance_level,
                before_score,
                after_score,
            )
            summary_report = build_summary_report(
                result.envelopes, context.compliance_level
            )
        except Exception as exc:
            logger.exception("Audit %s failed after context construction", audit_id)
            await self._fail(emitter, audit_id, exc)
            raise

        summary = report.executive_summary
        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.AUDIT_REPORT_READY,
            {
                "overall_score": summary.overall_score,
                "compliance_status": summary.compliance_status.value,
                "summary": summary_report.model_dump(mode="json"),
            },
        )

        logger.info(
            "Audit %s completed: score=%s issues=%s fixes=%s",
            audit_id,
            summary.overall_score,
            summary.total_issues,
            summary.total_fixes,
        )

        await emit_safely(
            emitter,
            audit_id,
            AuditEventType.AUDIT_COMPLETED,
            {"report": report.model_dump(mode="json")},
        )

        return report, summary_report

    async def _fail(
        self,
        emitter: AuditEventEmitter,
        audit_id: str,
        exc: Exception,
    ) -> None:
        details = {"error": str(exc)}
        if isinstance(exc, DocumentExtractionError):
            details["reason"] = exc.reason.value
        logger.warning("Audit %s failed: %s", audit_id, exc)
        await emit_safely(emitter, audit_id, AuditEventType.AUDIT_FAILED, details)
