"""
PDF text and metadata extraction.

Turns raw PDF bytes into the three things the analyzers consume: page
count, plain text, and document-level metadata.

- pypdf extracts visible page text (content streams + ToUnicode maps)
- pikepdf reads the document catalog (/Lang, /MarkInfo, /StructTreeRoot)
  and the document information dictionary

Every failure here is a context-construction failure and is raised as
DocumentExtractionError. Nothing downstream ever sees a partial
document.
"""

from __future__ import annotations

import io
import logging
from typing import Optional

import pikepdf
import pypdf
from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.errors import DocumentExtractionError, ExtractionFailureReason
from a11y_audit.app.schemas.context import DocumentMetadata

logger = logging.getLogger(__name__)


PDF_HEADER = b"%PDF-"
HEADER_SEARCH_BYTES = 1024


class ExtractedDocument(BaseModel):
    page_count: int = Field(0, ge=0)
    text: str = ""
    byte_length: int = Field(0, ge=0)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    truncated: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _text_or_none(value: object) -> Optional[str]:
    if value is None:
        return None
    try:
        text = str(value).strip()
    except Exception:
        return None
    return text or None


def read_catalog_metadata(pdf: pikepdf.Pdf) -> DocumentMetadata:
    root = pdf.Root
    info = pdf.trailer.get("/Info")

    def info_field(key: str) -> Optional[str]:
        if not isinstance(info, pikepdf.Dictionary):
            return None
        return _text_or_none(info.get(key))

    mark_info = root.get("/MarkInfo")
    marked = False
    if isinstance(mark_info, pikepdf.Dictionary):
        marked = bool(mark_info.get("/Marked", False))

    return DocumentMetadata(
        title=info_field("/Title"),
        author=info_field("/Author"),
        subject=info_field("/Subject"),
        keywords=info_field("/Keywords"),
        language=_text_or_none(root.get("/Lang")),
        tagged=marked or "/StructTreeRoot" in root,
    )


def extract_page_text(pdf_bytes: bytes) -> str:
    reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
    pages = []
    for page in reader.pages:
        text = page.extract_text()
        if text:
            pages.append(text)
    return "\n".join(pages).strip()


# ------------------------------------------------------------------
# Provider
# ------------------------------------------------------------------

class PdfTextExtractionProvider:
    def __init__(
        self,
        *,
        max_size_mb: int = 20,
        max_pages: int = 500,
        max_chars: int = 2_000_000,
        min_text_length: int = 0,
    ) -> None:
        self._max_size_bytes = max_size_mb * 1024 * 1024
        self._max_size_mb = max_size_mb
        self._max_pages = max_pages
        self._max_chars = max_chars
        self._min_text_length = min_text_length

    @classmethod
    def from_config(cls, config: A11yAuditConfig) -> "PdfTextExtractionProvider":
        return cls(
            max_size_mb=config.MAX_PDF_SIZE_MB,
            max_pages=config.MAX_PAGE_COUNT,
            max_chars=config.MAX_TEXT_EXTRACTION_CHARS,
            min_text_length=config.MIN_TEXT_LENGTH,
        )

    def extract(self, pdf_bytes: bytes) -> ExtractedDocument:
        if not pdf_bytes:
            raise DocumentExtractionError(
                ExtractionFailureReason.INVALID_FILE, "Document is empty"
            )

        if PDF_HEADER not in pdf_bytes[:HEADER_SEARCH_BYTES]:
            raise DocumentExtractionError(
                ExtractionFailureReason.INVALID_FILE, "Input is not a PDF document"
            )

        if len(pdf_bytes) > self._max_size_bytes:
            raise DocumentExtractionError(
                ExtractionFailureReason.FILE_TOO_LARGE,
                f"PDF exceeds maximum allowed size of {self._max_size_mb} MB",
            )

        try:
            with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
                if pdf.is_encrypted:
                    raise DocumentExtractionError(
                        ExtractionFailureReason.ENCRYPTED,
                        "Encrypted PDFs are not supported",
                    )
                page_count = len(pdf.pages)
                metadata = read_catalog_metadata(pdf)
        except pikepdf.PasswordError as exc:
            raise DocumentExtractionError(
                ExtractionFailureReason.ENCRYPTED,
                "Encrypted PDFs are not supported",
            ) from exc
        except pikepdf.PdfError as exc:
            raise DocumentExtractionError(
                ExtractionFailureReason.PARSING_ERROR,
                f"Unable to parse PDF: {exc}",
            ) from exc

        if page_count > self._max_pages:
            raise DocumentExtractionError(
                ExtractionFailureReason.TOO_MANY_PAGES,
                f"PDF has {page_count} pages; the limit is {self._max_pages}",
            )

        try:
            text = extract_page_text(pdf_bytes)
        except Exception as exc:
            raise DocumentExtractionError(
                ExtractionFailureReason.PARSING_ERROR,
                f"Unable to extract text: {exc}",
            ) from exc

        truncated = len(text) > self._max_chars
        if truncated:
            logger.warning(
                "Extracted text truncated from %s to %s characters",
                len(text),
                self._max_chars,
            )
            text = text[: self._max_chars]

        if len(text) < self._min_text_length:
            raise DocumentExtractionError(
                ExtractionFailureReason.NO_TEXT_CONTENT,
                f"PDF contains {len(text)} extractable characters; "
                f"at least {self._min_text_length} are required",
            )

        logger.debug(
            "Extracted %s characters from %s pages (tagged=%s)",
            len(text),
            page_count,
            metadata.tagged,
        )

        return ExtractedDocument(
            page_count=page_count,
            text=text,
            byte_length=len(pdf_bytes),
            metadata=metadata,
            truncated=truncated,
        )
