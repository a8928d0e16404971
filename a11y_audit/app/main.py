"""
FastAPI entrypoint for the accessibility audit service.

This module defines the public HTTP interface: it accepts PDF
documents, runs the heuristic accessibility audit and returns a
structured AuditReport (or one of its export renderings).

The application is stateless apart from the append-only execution log
that backs /stats.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, List, Optional, Set
from uuid import uuid4

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.responses import Response

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.errors import ContextConstructionError
from a11y_audit.app.events import MemoryQueueEventEmitter
from a11y_audit.app.orchestrator.audit_service import AccessibilityAuditService
from a11y_audit.app.reporting.exporters import export, pretty_json
from a11y_audit.app.schemas.issues import AnalyzerDescriptor
from a11y_audit.app.schemas.report import (
    AuditReport,
    ExecutionStats,
    ExportFormat,
    SummaryReport,
)

logger = logging.getLogger(__name__)


EXPORT_MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.HTML: "text/html; charset=utf-8",
    ExportFormat.MARKDOWN: "text/markdown; charset=utf-8",
    ExportFormat.CSV: "text/csv; charset=utf-8",
}

EXPORT_EXTENSIONS = {
    ExportFormat.JSON: "json",
    ExportFormat.HTML: "html",
    ExportFormat.MARKDOWN: "md",
    ExportFormat.CSV: "csv",
}

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}

# Strong references to in-flight streaming audits.
_background_tasks: Set[asyncio.Task] = set()


# ---------------------------------------------------------------------------
# Presentation helpers (presentation-only)
# ---------------------------------------------------------------------------

class PrettyJSONResponse(Response):
    """Pretty-printed JSON response for human-readable output."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return pretty_json(content).encode("utf-8")


# ---------------------------------------------------------------------------
# Application setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Accessibility Audit Service",
    description="Heuristic WCAG accessibility analysis for PDF documents",
    version="0.3.0",
)


# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------

@app.on_event("startup")
def startup_event() -> None:
    """
    Application startup hook.

    Configuration is loaded once and treated as immutable for the
    lifetime of the process. The optional fix generator is wired here.
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = A11yAuditConfig.from_env()

    app.state.config = config
    app.state.service = AccessibilityAuditService.from_config(config)

    logger.info(
        "Accessibility audit service started (level=%s, fix_provider=%s)",
        config.DEFAULT_COMPLIANCE_LEVEL.value,
        config.FIX_GENERATOR_PROVIDER,
    )


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

async def read_pdf_upload(request: Request, pdf: UploadFile) -> bytes:
    if pdf.content_type not in PDF_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Only application/pdf content is supported",
        )

    try:
        pdf_bytes = await pdf.read()
    except Exception as exc:
        raise HTTPException(
            status_code=400,
            detail="Failed to read uploaded PDF",
        ) from exc

    if not pdf_bytes:
        raise HTTPException(
            status_code=400,
            detail="Uploaded PDF is empty",
        )

    # ------------------------------------------------------------------
    # Hard resource safety limits
    # ------------------------------------------------------------------
    config: A11yAuditConfig = request.app.state.config
    max_size_bytes = config.MAX_PDF_SIZE_MB * 1024 * 1024

    if len(pdf_bytes) > max_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=(
                f"PDF exceeds maximum allowed size of "
                f"{config.MAX_PDF_SIZE_MB} MB"
            ),
        )

    return pdf_bytes


async def audit_upload(
    request: Request,
    pdf: UploadFile,
    compliance_level: Optional[ComplianceLevel],
    language: Optional[str],
) -> AuditReport:
    pdf_bytes = await read_pdf_upload(request, pdf)
    service: AccessibilityAuditService = request.app.state.service

    try:
        return await service.run_audit(
            pdf_bytes=pdf_bytes,
            file_name=pdf.filename or "document.pdf",
            audit_id=str(uuid4()),
            compliance_level=compliance_level,
            language=language,
        )
    except ContextConstructionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# API Routes
# ---------------------------------------------------------------------------

@app.post(
    "/audit",
    response_model=AuditReport,
    response_class=PrettyJSONResponse,
    summary="Audit a PDF document for accessibility",
)
async def audit_document(
    request: Request,
    pdf: UploadFile = File(..., description="PDF document to audit"),
    compliance_level: Optional[ComplianceLevel] = Form(None),
    language: Optional[str] = Form(None),
) -> AuditReport:
    return await audit_upload(request, pdf, compliance_level, language)


@app.post(
    "/audit/export",
    summary="Audit a PDF document and return a rendered report",
)
async def audit_document_export(
    request: Request,
    pdf: UploadFile = File(..., description="PDF document to audit"),
    format: ExportFormat = Query(ExportFormat.JSON),
    compliance_level: Optional[ComplianceLevel] = Form(None),
    language: Optional[str] = Form(None),
) -> Response:
    report = await audit_upload(request, pdf, compliance_level, language)
    rendered = export(report, format)

    return Response(
        content=rendered,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={
            "Content-Disposition": (
                f'attachment; filename="accessibility-report.'
                f'{EXPORT_EXTENSIONS[format]}"'
            )
        },
    )


@app.post(
    "/audit/summary",
    response_model=SummaryReport,
    response_class=PrettyJSONResponse,
    summary="Audit a PDF document and return the lightweight summary",
)
async def audit_document_summary(
    request: Request,
    pdf: UploadFile = File(..., description="PDF document to audit"),
    compliance_level: Optional[ComplianceLevel] = Form(None),
    language: Optional[str] = Form(None),
) -> SummaryReport:
    pdf_bytes = await read_pdf_upload(request, pdf)
    service: AccessibilityAuditService = request.app.state.service

    try:
        return await service.run_summary(
            pdf_bytes=pdf_bytes,
            file_name=pdf.filename or "document.pdf",
            audit_id=str(uuid4()),
            compliance_level=compliance_level,
            language=language,
        )
    except ContextConstructionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Streaming Audit (SSE)
# ---------------------------------------------------------------------------

@app.post(
    "/audit/stream",
    summary="Audit a PDF document (streaming progress)",
)
async def audit_document_stream(
    request: Request,
    pdf: UploadFile = File(..., description="PDF document to audit"),
    compliance_level: Optional[ComplianceLevel] = Form(None),
    language: Optional[str] = Form(None),
    analyzers: Optional[str] = Query(
        None,
        description="Comma-separated analyzer names whose events to stream",
    ),
):
    """
    Run an audit while streaming lifecycle events.

    - Client disconnects do NOT cancel the audit
    - Events do NOT influence execution
    - The final audit_completed event carries the AuditReport
    - `analyzers` narrows analyzer events; audit-level events always flow
    """
    pdf_bytes = await read_pdf_upload(request, pdf)
    service: AccessibilityAuditService = request.app.state.service
    audit_id = str(uuid4())
    emitter = MemoryQueueEventEmitter()
    selected = (
        {name.strip() for name in analyzers.split(",") if name.strip()}
        if analyzers
        else None
    )

    # --------------------------------------------------------------
    # Background audit execution
    # --------------------------------------------------------------
    async def run_audit_task() -> None:
        try:
            await service.run_audit(
                pdf_bytes=pdf_bytes,
                file_name=pdf.filename or "document.pdf",
                audit_id=audit_id,
                compliance_level=compliance_level,
                language=language,
                emitter=emitter,
            )
        except Exception as exc:
            # The service already emitted audit_failed.
            logger.info("Streaming audit %s ended with error: %s", audit_id, exc)

    task = asyncio.create_task(run_audit_task())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    # --------------------------------------------------------------
    # SSE event stream
    # --------------------------------------------------------------
    async def event_stream():
        try:
            async for event in emitter.stream(selected):
                yield event.to_sse_payload()
        except asyncio.CancelledError:
            # Client disconnected; audit continues
            pass

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------

@app.get(
    "/analyzers",
    response_model=List[AnalyzerDescriptor],
    summary="List registered analyzers and the rules they check",
)
def list_analyzers(request: Request) -> List[AnalyzerDescriptor]:
    service: AccessibilityAuditService = request.app.state.service
    return service.describe_analyzers()


@app.get(
    "/stats",
    response_model=ExecutionStats,
    summary="Execution statistics across audits served by this process",
)
def execution_stats(request: Request) -> ExecutionStats:
    service: AccessibilityAuditService = request.app.state.service
    return service.stats()


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------

@app.get(
    "/health",
    summary="Service health check",
)
def health_check() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": "a11y-audit",
        }
    )
