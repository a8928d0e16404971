from a11y_audit.app.analyzers.metadata_inference import (
    DEFAULT_SUBJECT,
    DEFAULT_TITLE,
    MetadataInferenceAnalyzer,
    current_metadata,
    extract_keywords,
    extract_potential_title,
    infer_subject,
)
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.app.schemas.context import DocumentMetadata
from a11y_audit.app.schemas.issues import IssueCategory, Severity
from a11y_audit.tests.fixtures.contexts import make_context


REPORT_TEXT = (
    "Annual Accessibility Report\n"
    "1. Introduction\n"
    "Accessibility audits covered every public document this year.\n"
    "Audits found that accessibility improved in most documents.\n"
)

COMPLETE_METADATA = DocumentMetadata(
    title="Annual Accessibility Report",
    author="Digital Services Team",
    subject="Yearly review of accessibility audit outcomes",
    keywords="accessibility, audit, wcag",
    language="en-GB",
    tagged=True,
)


def _descriptions(envelope):
    return [issue.description for issue in envelope.issues]


def test_always_eligible():
    assert MetadataInferenceAnalyzer().eligible(make_context("")) is True


def test_file_stem_stands_in_for_missing_title():
    record = current_metadata(make_context("x", file_name="budget-2024.pdf"))
    assert record.title == "budget-2024"
    assert record.tagged is False

    record = current_metadata(make_context("x", file_name="a.pdf"))
    assert record.title is None


def test_provider_metadata_wins():
    context = make_context("x", file_name="scan.pdf", metadata=COMPLETE_METADATA)
    record = current_metadata(context)
    assert record.title == "Annual Accessibility Report"
    assert record.tagged is True


def test_untagged_pseudo_record_issues():
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context(REPORT_TEXT, file_name="doc.pdf")
    )

    assert envelope.success is True
    assert all(i.category == IssueCategory.METADATA for i in envelope.issues)
    assert _descriptions(envelope) == [
        "PDF lacks a proper document title",
        "PDF lacks author information",
        "PDF lacks subject/description metadata",
        "PDF lacks keyword metadata for discoverability",
        "PDF is not tagged for accessibility",
    ]


def test_unknown_language_is_missing():
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context(REPORT_TEXT, language="unknown")
    )

    language = [i for i in envelope.issues if "language" in i.description]
    assert len(language) == 1
    assert language[0].severity == Severity.HIGH
    assert language[0].rule_ids == ["3.1.1"]


def test_complete_metadata_has_no_issues():
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context(REPORT_TEXT, metadata=COMPLETE_METADATA)
    )
    assert envelope.issues == []


def test_inadequate_values_are_low_or_medium():
    metadata = DocumentMetadata(
        title="Untitled document",
        author="Someone",
        subject="Misc",
        keywords="pdf",
        tagged=True,
    )
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context(REPORT_TEXT, metadata=metadata)
    )

    severities = {i.description: i.severity for i in envelope.issues}
    assert severities == {
        "PDF title is inadequate or generic": Severity.MEDIUM,
        "PDF subject is too short to describe the document": Severity.LOW,
        "PDF keyword metadata has fewer than 3 terms": Severity.LOW,
    }


def test_recommendation_helpers():
    assert extract_potential_title(REPORT_TEXT) == "Annual Accessibility Report"
    assert extract_potential_title("Page 1\n| a | b |\n") == DEFAULT_TITLE

    keywords = extract_keywords(REPORT_TEXT)
    assert keywords[0] == "accessibility"
    assert "audits" in keywords
    assert "documents" not in keywords

    assert infer_subject(REPORT_TEXT) == "Analytical report containing data and findings"
    assert infer_subject("Nothing to classify here") == DEFAULT_SUBJECT


def test_heuristic_fixes_use_recommendations():
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context(REPORT_TEXT, file_name="doc.pdf"), HeuristicFixGenerator()
    )

    after = {fix.kind: fix.after_value for fix in envelope.fixes}
    assert after["metadata_title"] == "Annual Accessibility Report"
    assert after["metadata_subject"] == "Analytical report containing data and findings"
    assert after["metadata_keywords"].startswith("accessibility")
    assert after["metadata_accessibility"] == (
        "Accessibility tags enabled with proper document structure"
    )
    assert all(fix.applied is False for fix in envelope.fixes)


def test_keywords_fix_skipped_when_nothing_recurs():
    envelope = MetadataInferenceAnalyzer().run_sync(
        make_context("Short unique words only.", file_name="doc.pdf"),
        HeuristicFixGenerator(),
    )
    assert "metadata_keywords" not in {fix.kind for fix in envelope.fixes}
