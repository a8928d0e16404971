import pytest

from a11y_audit.app.catalog import ComplianceLevel
from a11y_audit.app.errors import ContextConstructionError
from a11y_audit.app.extraction.context_builder import (
    build_analysis_context,
    detect_images,
    detect_links,
    detect_tables,
    extracted_from_text,
    resolve_compliance_level,
    resolve_language,
)
from a11y_audit.app.schemas.context import DocumentMetadata


def test_feature_detectors():
    assert detect_images("See Figure 4 for details")
    assert not detect_images("Plain prose only")

    assert detect_tables("a | b | c")
    assert detect_tables("Table 2 lists the totals")
    assert not detect_tables("No tabular content; not even a tablet.")

    assert detect_links("Visit https://example.com")
    assert detect_links("Mail help@example.org")
    assert not detect_links("Click here to download the report.")


def test_language_resolution_order():
    assert resolve_language("fr", "de", "en") == "fr"
    assert resolve_language(None, "de", "en") == "de"
    assert resolve_language("  ", None, "en") == "en"


def test_compliance_level_resolution():
    assert resolve_compliance_level(None, ComplianceLevel.AA) == ComplianceLevel.AA
    assert resolve_compliance_level("aaa", ComplianceLevel.AA) == ComplianceLevel.AAA
    assert resolve_compliance_level(ComplianceLevel.A, ComplianceLevel.AA) == ComplianceLevel.A
    with pytest.raises(ContextConstructionError):
        resolve_compliance_level("AAAA", ComplianceLevel.AA)


def test_page_count_estimated_from_text():
    assert extracted_from_text("").page_count == 0
    assert extracted_from_text("x" * 3001).page_count == 2
    assert extracted_from_text("x", page_count=7).page_count == 7


def test_negative_page_count_is_a_construction_error():
    with pytest.raises(ContextConstructionError):
        extracted_from_text("x", page_count=-1)


def test_context_from_extracted_text():
    extracted = extracted_from_text(
        "Figure 1 shows totals.\nName | Value | %\nhttps://example.com",
        metadata=DocumentMetadata(language="de-DE", tagged=True),
    )
    context = build_analysis_context(
        extracted,
        file_name="bericht.pdf",
        compliance_level="A",
    )

    assert context.has_images and context.has_tables and context.has_links
    assert context.language == "de-DE"
    assert context.compliance_level == ComplianceLevel.A
    assert context.metadata.tagged is True
    assert context.file_name == "bericht.pdf"


def test_empty_file_name_falls_back():
    context = build_analysis_context(extracted_from_text("text"), file_name="")
    assert context.file_name == "document.pdf"
