"""
Table-structure analyzer.

Finds tabular runs of text (pipe- or tab-delimited rows, or rows with
aggregation keywords), decides whether each run is a data table or a
layout table, and reports missing headers, missing captions and tables
complex enough to need extra markup. Layout tables are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.analyzers.base import BaseAnalyzer, FixPlan
from a11y_audit.app.analyzers.text_utils import page_for_line, split_lines
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue, IssueCategory, Severity

logger = logging.getLogger(__name__)


MAX_TABLES = 10
DATA_TABLE_RATIO = 0.3
SAMPLE_ROWS = 5
COMPLEX_COLUMNS = 5
COMPLEX_ROWS = 10
CONTEXT_CHARS = 200

HEADER_WORDS = (
    "name", "type", "date", "value", "description", "id", "category", "status",
)

_AGGREGATION_KEYWORDS = re.compile(r"\b(?:total|sum|average)\b|[%$]", re.IGNORECASE)
_NUMERIC_CELL = re.compile(r"^\d+(\.\d+)?$")
_DATA_CELL = re.compile(r"^\d+(\.\d+)?%?$")
_CURRENCY_CELL = re.compile(r"^\$\d+")


class TableCandidate(BaseModel):
    index: int = Field(..., description="Zero-based table number")
    page: int
    start_line: int
    rows: List[List[str]]
    row_count: int
    column_count: int
    has_headers: bool
    has_caption: bool = False
    headers: List[str] = Field(default_factory=list)
    sample_data: List[List[str]] = Field(default_factory=list)
    is_data_table: bool
    is_complex: bool
    context_text: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def number(self) -> int:
        return self.index + 1


class TableAnalysis(BaseModel):
    tables: List[TableCandidate] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def data_tables(self) -> List[TableCandidate]:
        return [t for t in self.tables if t.is_data_table]

    @property
    def layout_tables(self) -> List[TableCandidate]:
        return [t for t in self.tables if not t.is_data_table]

    @property
    def tables_without_headers(self) -> List[TableCandidate]:
        return [t for t in self.data_tables if not t.has_headers]

    @property
    def tables_without_captions(self) -> List[TableCandidate]:
        return [t for t in self.data_tables if not t.has_caption]

    @property
    def complex_tables(self) -> List[TableCandidate]:
        return [t for t in self.data_tables if t.is_complex]


# ----------------------------------------------------------------------
# Detection helpers
# ----------------------------------------------------------------------

def looks_like_table_row(line: str) -> bool:
    return (
        line.count("|") >= 2
        or line.count("\t") >= 2
        or _AGGREGATION_KEYWORDS.search(line) is not None
    )


def split_cells(lines: List[str]) -> List[List[str]]:
    separator = "|" if "|" in lines[0] else "\t"
    rows: List[List[str]] = []
    for line in lines:
        cells = [cell.strip() for cell in line.split(separator)]
        cells = [cell for cell in cells if cell]
        if len(cells) > 1:
            rows.append(cells)
    return rows


def _numeric_count(row: List[str]) -> int:
    return sum(1 for cell in row if _NUMERIC_CELL.match(cell))


def detect_headers(rows: List[List[str]]) -> bool:
    first_row = rows[0]
    if not first_row:
        return False

    has_header_words = any(
        word in cell.lower() for cell in first_row for word in HEADER_WORDS
    )

    following = rows[1:3]
    avg_numeric = (
        sum(_numeric_count(row) for row in following) / len(following)
        if following
        else 0.0
    )

    return has_header_words or (
        avg_numeric > 0 and _numeric_count(first_row) < avg_numeric
    )


def is_data_table(rows: List[List[str]]) -> bool:
    cells = [cell for row in rows[:SAMPLE_ROWS] for cell in row]
    if len(rows) < 2 or not cells:
        return False
    data_cells = sum(
        1 for cell in cells if _DATA_CELL.match(cell) or _CURRENCY_CELL.match(cell)
    )
    return data_cells / len(cells) > DATA_TABLE_RATIO


def parse_table(
    lines: List[str],
    index: int,
    start_line: int,
    end_line: int,
) -> Optional[TableCandidate]:
    if len(lines) < 2:
        return None

    rows = split_cells(lines)
    if len(rows) < 2:
        return None

    columns = max(len(row) for row in rows)
    has_headers = detect_headers(rows)

    return TableCandidate(
        index=index,
        page=page_for_line(end_line),
        start_line=start_line + 1,
        rows=rows,
        row_count=len(rows),
        column_count=columns,
        has_headers=has_headers,
        headers=rows[0] if has_headers else [],
        sample_data=rows[1 if has_headers else 0:4],
        is_data_table=is_data_table(rows),
        is_complex=columns > COMPLEX_COLUMNS or len(rows) > COMPLEX_ROWS,
        context_text=" ".join(lines[:3])[:CONTEXT_CHARS],
    )


def extract_tables(text: str) -> List[TableCandidate]:
    lines = split_lines(text)
    tables: List[TableCandidate] = []
    run: List[str] = []
    run_start = 0

    def close_run(end_line: int) -> None:
        table = parse_table(run, len(tables), run_start, end_line)
        if table is not None:
            tables.append(table)

    for number, line in enumerate(lines):
        if looks_like_table_row(line):
            if not run:
                run_start = number
            run.append(line)
            continue
        if len(run) > 1:
            close_run(number)
        run = []
        if len(tables) >= MAX_TABLES:
            break

    if len(run) > 1 and len(tables) < MAX_TABLES:
        close_run(len(lines))

    return tables[:MAX_TABLES]


# ----------------------------------------------------------------------
# Analyzer
# ----------------------------------------------------------------------

class TableStructureAnalyzer(BaseAnalyzer):
    name = "table_accessibility"
    description = (
        "Analyzes tables for proper headers, captions, and accessibility "
        "structure"
    )
    rule_ids = ("1.3.1", "1.3.2", "2.4.6")

    def eligible(self, context: AnalysisContext) -> bool:
        return context.has_tables

    def analyze(self, context: AnalysisContext) -> TableAnalysis:
        analysis = TableAnalysis(tables=extract_tables(context.text))
        logger.debug(
            "Detected %s table candidates (%s layout tables ignored)",
            len(analysis.tables),
            len(analysis.layout_tables),
        )
        return analysis

    def identify_issues(
        self,
        analysis: TableAnalysis,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        for table in analysis.tables_without_headers:
            yield Issue(
                category=IssueCategory.TABLE_HEADERS,
                severity=Severity.HIGH,
                description=(
                    f"Table {table.number} on page {table.page} lacks proper headers"
                ),
                location=f"Page {table.page}",
                rule_ids=["1.3.1"],
                suggestion=(
                    "Add header row to identify column contents for screen "
                    "reader users"
                ),
            )

        for table in analysis.tables_without_captions:
            yield Issue(
                category=IssueCategory.TABLE_HEADERS,
                severity=Severity.MEDIUM,
                description=(
                    f"Table {table.number} on page {table.page} lacks "
                    "descriptive caption"
                ),
                location=f"Page {table.page}",
                rule_ids=["1.3.1", "2.4.6"],
                suggestion="Add caption describing the table's purpose and content",
            )

        for table in analysis.complex_tables:
            yield Issue(
                category=IssueCategory.TABLE_HEADERS,
                severity=Severity.MEDIUM,
                description=(
                    f"Complex table {table.number} may need additional "
                    "accessibility markup"
                ),
                location=f"Page {table.page}",
                rule_ids=["1.3.1", "1.3.2"],
                suggestion=(
                    "Complex tables may need header associations and "
                    "summary information"
                ),
            )

    def plan_fixes(
        self,
        analysis: TableAnalysis,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        by_description = {issue.description: issue for issue in issues}

        for table in analysis.tables_without_headers:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="table_header_generation",
                    issue=by_description.get(
                        f"Table {table.number} on page {table.page} lacks proper headers"
                    ),
                    subject=" | ".join(table.sample_data[0]) if table.sample_data else "",
                    hints=self._hints(table),
                ),
                description=f"Generated headers for table {table.number}",
                rule_ids=["1.3.1"],
                before_value="No headers",
            )

        for table in analysis.tables_without_captions:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="table_caption_generation",
                    issue=by_description.get(
                        f"Table {table.number} on page {table.page} lacks "
                        "descriptive caption"
                    ),
                    subject=table.context_text,
                    hints=self._hints(table),
                ),
                description=f"Generated caption for table {table.number}",
                rule_ids=["1.3.1", "2.4.6"],
                before_value="No caption",
            )

    @staticmethod
    def _hints(table: TableCandidate) -> dict:
        return {
            "table_number": table.number,
            "rows": table.row_count,
            "columns": table.column_count,
            "headers": list(table.headers),
            "sample_data": [list(row) for row in table.sample_data],
            "context": table.context_text,
        }
