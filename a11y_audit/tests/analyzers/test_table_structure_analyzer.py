from a11y_audit.app.analyzers.table_structure import (
    TableStructureAnalyzer,
    detect_headers,
    extract_tables,
    is_data_table,
)
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.app.schemas.issues import IssueCategory, Severity
from a11y_audit.tests.fixtures.contexts import TABLE_SCENARIO, make_context


HEADERLESS_TABLE = "Alpha | 12 | 14\nBeta | 15 | 16\nGamma | 17 | 18"
LAYOUT_TABLE = "Left | Right | Center\nTop | Middle | Bottom"


def test_pipe_table_is_parsed():
    tables = extract_tables(TABLE_SCENARIO)

    assert len(tables) == 1
    table = tables[0]
    assert table.row_count == 3
    assert table.column_count == 3
    assert table.has_headers is True
    assert table.headers == ["Name", "Value", "%"]
    assert table.is_data_table is True
    assert table.is_complex is False
    assert table.number == 1


def test_header_and_data_heuristics():
    assert detect_headers([["Alpha", "12"], ["Beta", "15"]]) is False
    assert detect_headers([["Region", "Total"], ["North", "12"]]) is True
    assert is_data_table([["Left", "Right"], ["Top", "Bottom"]]) is False


def test_caption_missing_on_headed_table():
    context = make_context(TABLE_SCENARIO, has_tables=True)
    envelope = TableStructureAnalyzer().run_sync(context)

    assert envelope.success is True
    assert len(envelope.issues) == 1
    issue = envelope.issues[0]
    assert issue.description == "Table 1 on page 1 lacks descriptive caption"
    assert issue.category == IssueCategory.TABLE_HEADERS
    assert issue.severity == Severity.MEDIUM
    assert not any("lacks proper headers" in i.description for i in envelope.issues)


def test_headerless_data_table():
    envelope = TableStructureAnalyzer().run_sync(
        make_context(HEADERLESS_TABLE, has_tables=True)
    )

    severities = {i.description: i.severity for i in envelope.issues}
    assert severities["Table 1 on page 1 lacks proper headers"] == Severity.HIGH
    assert severities["Table 1 on page 1 lacks descriptive caption"] == Severity.MEDIUM


def test_layout_tables_are_ignored():
    context = make_context(LAYOUT_TABLE, has_tables=True)
    analysis = TableStructureAnalyzer().analyze(context)
    assert len(analysis.layout_tables) == 1
    assert analysis.data_tables == []

    envelope = TableStructureAnalyzer().run_sync(context)
    assert envelope.success is True
    assert envelope.issues == []


def test_complex_table_flagged():
    rows = ["Id | A | B | C | D | E"] + [
        f"{n} | {n} | {n} | {n} | {n} | {n}" for n in range(1, 4)
    ]
    envelope = TableStructureAnalyzer().run_sync(
        make_context("\n".join(rows), has_tables=True)
    )
    assert any(
        i.description == "Complex table 1 may need additional accessibility markup"
        for i in envelope.issues
    )


def test_heuristic_headers_and_caption():
    envelope = TableStructureAnalyzer().run_sync(
        make_context(HEADERLESS_TABLE, has_tables=True), HeuristicFixGenerator()
    )

    by_kind = {}
    for fix in envelope.fixes:
        by_kind[fix.description] = fix.after_value

    assert by_kind["Generated headers for table 1"] == "Item | Value | Value"
    assert by_kind["Generated caption for table 1"] == (
        "Table 1: Data organized in 3 rows and 3 columns"
    )


def test_table_candidates_are_capped_at_ten():
    text = "\n\n".join("Name | Value | %\nA | 1 | 10%" for _ in range(15))
    tables = extract_tables(text)

    assert len(tables) == 10
    assert [t.number for t in tables] == list(range(1, 11))

    envelope = TableStructureAnalyzer().run_sync(make_context(text, has_tables=True))
    captions = [i for i in envelope.issues if "lacks descriptive caption" in i.description]
    assert len(captions) == 10
