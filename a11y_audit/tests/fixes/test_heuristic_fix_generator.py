import anyio

from a11y_audit.app.fixes.generator import FixGenerator, FixRequest
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.tests.fixtures.contexts import make_context


CONTEXT = make_context("Quarterly review text.", file_name="quarterly-review.pdf")


def _generate(kind: str, subject: str = "", **hints) -> str:
    request = FixRequest(
        analyzer_name="test",
        kind=kind,
        subject=subject,
        hints=hints,
    )

    async def _run() -> str:
        return await HeuristicFixGenerator().generate(request, CONTEXT)

    return anyio.run(_run)


def test_satisfies_fix_generator_protocol():
    assert isinstance(HeuristicFixGenerator(), FixGenerator)
    assert "alt_text_generation" in HeuristicFixGenerator().supported_kinds


def test_unknown_kind_yields_no_fix():
    assert _generate("colour_contrast_repair") == ""


def test_link_kinds():
    assert _generate(
        "link_text_improvement", "help@example.org", link_kind="email"
    ) == "Email help@example.org"
    assert _generate(
        "link_text_improvement", "555-123-4567", link_kind="phone"
    ) == "Call 555-123-4567"
    assert _generate(
        "link_text_improvement",
        "https://www.example.com/docs",
        link_kind="url",
        url="https://www.example.com/docs",
    ) == "Visit example.com"


def test_generic_link_falls_back_to_topic():
    text = _generate(
        "link_text_improvement",
        "read more",
        link_kind="generic",
        context="Pension changes [LINK]",
    )
    assert text == "Learn more about pension"

    assert _generate(
        "link_text_improvement", "here", link_kind="generic", context="[LINK]"
    ) == "Learn more details"


def test_table_headers_follow_column_content():
    headers = _generate(
        "table_header_generation",
        columns=4,
        sample_data=[["North", "12", "40%", "$100"], ["South", "8", "60%", "$80"]],
    )
    assert headers == "Item | Value | Percentage | Amount"


def test_table_caption_rules():
    assert _generate(
        "table_caption_generation", rows=4, columns=3, context="Budget by department"
    ) == "Financial data table with 4 rows and 3 columns"
    assert _generate(
        "table_caption_generation", rows=2, columns=2, context="Team rota"
    ) == "Table 1: Data organized in 2 rows and 2 columns"


def test_heading_uniqueness():
    assert _generate(
        "heading_uniqueness", duplicates=["Overview", "Summary"]
    ) == '"Overview" -> "Overview (Section 1)"\n"Summary" -> "Summary (Section 2)"'


def test_complex_alt_text_asks_for_extended_description():
    text = _generate(
        "alt_text_generation",
        "Chart 2",
        image_kind="chart",
        context="Chart 2 compares revenue growth",
        is_complex=True,
    )
    assert text.startswith("Chart 2 showing compares revenue growth")
    assert text.endswith("provide an extended description of the data it presents")


def test_metadata_language_falls_back_to_context():
    assert _generate("metadata_language") == "en"
    assert _generate("metadata_language", language="fr") == "fr"
