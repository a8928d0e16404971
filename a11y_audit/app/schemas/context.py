"""
Per-run analysis input.

An AnalysisContext is created once per document by the caller (usually
via the context builder), never mutated, and shared read-only by every
analyzer in the run.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.catalog import ComplianceLevel


class DocumentMetadata(BaseModel):
    """
    Document-level metadata reported by the extraction provider.

    Every field is optional; None means "not present in the document",
    not "unknown".
    """

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    language: Optional[str] = None
    tagged: Optional[bool] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class AnalysisContext(BaseModel):
    text: str = Field("", description="Extracted plain text of the document")
    page_count: int = Field(0, ge=0)
    byte_length: int = Field(0, ge=0)

    has_images: bool = False
    has_tables: bool = False
    has_links: bool = False

    language: str = Field("en", description="Declared language tag")
    compliance_level: ComplianceLevel = ComplianceLevel.AA

    file_name: str = Field("document.pdf", min_length=1)
    metadata: Optional[DocumentMetadata] = Field(
        None,
        description="Real document metadata, when the provider could read it",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def text_length(self) -> int:
        return len(self.text)
