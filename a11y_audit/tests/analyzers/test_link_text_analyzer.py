from a11y_audit.app.analyzers.link_text import (
    LinkTextAnalyzer,
    extract_links,
    is_descriptive_link_text,
    is_generic_link_text,
)
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.app.schemas.issues import IssueCategory, Severity
from a11y_audit.tests.fixes.mock_fix_generators import RecordingFixGenerator
from a11y_audit.tests.fixtures.contexts import LINK_SCENARIO, make_context


def test_link_classification():
    assert is_generic_link_text("Click here")
    assert is_generic_link_text("  READ MORE ")
    assert not is_generic_link_text("Annual report 2024")

    assert is_descriptive_link_text("Annual accessibility report")
    assert not is_descriptive_link_text("here")
    assert not is_descriptive_link_text("learn more about us")


def test_candidates_are_recovered_from_text():
    text = (
        "See https://www.example.com/docs for the guidelines.\n"
        "Questions go to help@example.org during office hours."
    )
    links = extract_links(text)

    kinds = [link.kind for link in links]
    assert "url" in kinds
    assert "email" in kinds

    url = next(link for link in links if link.kind == "url")
    assert url.is_external is True
    assert url.url == "https://www.example.com/docs"
    assert "[LINK]" in url.context_text


def test_not_eligible_without_links():
    assert LinkTextAnalyzer().eligible(make_context(LINK_SCENARIO)) is False


def test_generic_link_text_is_high_severity():
    context = make_context(LINK_SCENARIO, has_links=True)
    envelope = LinkTextAnalyzer().run_sync(context)

    assert envelope.success is True
    generic = [
        issue for issue in envelope.issues
        if "generic text" in issue.description
    ]
    assert len(generic) == 1
    assert generic[0].severity == Severity.HIGH
    assert generic[0].category == IssueCategory.LINK_TEXT
    assert "2.4.4" in generic[0].rule_ids


def test_external_link_without_warning():
    text = "Our partner publishes guidance at https://example.com/guidance for all members."
    envelope = LinkTextAnalyzer().run_sync(make_context(text, has_links=True))

    external = [i for i in envelope.issues if "external links" in i.description]
    assert len(external) == 1
    assert external[0].severity == Severity.LOW
    assert external[0].rule_ids == ["3.2.1"]


def test_external_warning_suppresses_issue():
    text = (
        "Our partner publishes guidance at https://example.com/guidance "
        "(opens in new window) for all members."
    )
    envelope = LinkTextAnalyzer().run_sync(make_context(text, has_links=True))
    assert not any("external links" in i.description for i in envelope.issues)


def test_generic_links_get_one_fix_each():
    generator = RecordingFixGenerator()
    envelope = LinkTextAnalyzer().run_sync(
        make_context(LINK_SCENARIO, has_links=True), generator
    )

    # "Click here" and "download" are both generic; neither is re-planned
    # as merely undescriptive.
    assert generator.kinds == ["link_text_improvement", "link_text_improvement"]
    assert [fix.before_value for fix in envelope.fixes] == ["Click here", "download"]


def test_heuristic_link_text_uses_context():
    envelope = LinkTextAnalyzer().run_sync(
        make_context(LINK_SCENARIO, has_links=True), HeuristicFixGenerator()
    )

    assert [fix.after_value for fix in envelope.fixes] == [
        "Download document",
        "View full report",
    ]


def test_link_candidates_are_capped_at_fifty():
    text = "\n".join(f"Write to contact{n}@example.org" for n in range(60))
    links = extract_links(text)

    assert len(links) == 50
    assert links[-1].text == "contact49@example.org"


def test_repeated_link_text_is_reported_once_per_set():
    text = (
        "Send the form to help@example.org before Friday.\n"
        "Late submissions also go to HELP@example.org with a note."
    )
    envelope = LinkTextAnalyzer().run_sync(make_context(text, has_links=True))

    duplicates = [i for i in envelope.issues if "duplicate link text" in i.description]
    assert len(duplicates) == 1
    assert duplicates[0].description == "Found 1 sets of duplicate link text"
    assert duplicates[0].severity == Severity.MEDIUM
    assert duplicates[0].rule_ids == ["3.2.4"]


def test_bare_link_lacks_context():
    envelope = LinkTextAnalyzer().run_sync(
        make_context("https://example.com", has_links=True)
    )

    thin = [i for i in envelope.issues if "lacking sufficient context" in i.description]
    assert len(thin) == 1
    assert thin[0].description == "Found 1 links lacking sufficient context"
    assert thin[0].severity == Severity.MEDIUM
    assert not any("duplicate link text" in i.description for i in envelope.issues)
