import io
from typing import List, Optional

import pikepdf
from pikepdf import Dictionary, Name, Stream, String


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _text_stream(lines: List[str]) -> bytes:
    """
    Content stream that renders one Helvetica text line per entry,
    top to bottom, using T* for line breaks.
    """
    ops = ["BT", "/F1 12 Tf", "14 TL", "72 760 Td"]
    for index, line in enumerate(lines):
        if index:
            ops.append("T*")
        ops.append(f"({_escape(line)}) Tj")
    ops.append("ET")
    return "\n".join(ops).encode("latin-1")


def _add_text_page(pdf: pikepdf.Pdf, lines: List[str]) -> None:
    page = pdf.add_blank_page(page_size=(595, 842))

    font = pdf.make_indirect(
        Dictionary(
            Type=Name.Font,
            Subtype=Name.Type1,
            BaseFont=Name.Helvetica,
        )
    )

    page.Resources = Dictionary(Font=Dictionary(F1=font))
    page.Contents = pdf.make_indirect(Stream(pdf, _text_stream(lines)))


# ------------------------------------------------------------------
# Minimal PDFs
# ------------------------------------------------------------------

def blank_pdf(pages: int = 1) -> bytes:
    """Structurally valid PDF with blank pages and no text."""
    buffer = io.BytesIO()
    with pikepdf.new() as pdf:
        for _ in range(pages):
            pdf.add_blank_page(page_size=(595, 842))
        pdf.save(buffer)
    return buffer.getvalue()


def not_a_pdf() -> bytes:
    return b"This is plain text, not a PDF document."


def truncated_pdf() -> bytes:
    """Starts like a PDF but contains no objects at all."""
    return b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\nthis is not an object graph\n"


# ------------------------------------------------------------------
# Text PDFs
# ------------------------------------------------------------------

def text_pdf(
    pages: List[List[str]],
    *,
    title: Optional[str] = None,
    author: Optional[str] = None,
    subject: Optional[str] = None,
    keywords: Optional[str] = None,
    lang: Optional[str] = None,
    marked: bool = False,
) -> bytes:
    """
    PDF with extractable text: one list of lines per page.

    Optional document information entries, a catalog /Lang and a
    /MarkInfo << /Marked true >> flag can be set to exercise metadata
    extraction.
    """
    buffer = io.BytesIO()

    with pikepdf.new() as pdf:
        for lines in pages:
            _add_text_page(pdf, lines)

        info = {
            "/Title": title,
            "/Author": author,
            "/Subject": subject,
            "/Keywords": keywords,
        }
        if any(value is not None for value in info.values()):
            docinfo = pdf.make_indirect(Dictionary())
            for key, value in info.items():
                if value is not None:
                    docinfo[key] = String(value)
            pdf.docinfo = docinfo

        if lang is not None:
            pdf.Root.Lang = String(lang)

        if marked:
            pdf.Root.MarkInfo = Dictionary(Marked=True)

        pdf.save(buffer)

    return buffer.getvalue()


def encrypted_pdf() -> bytes:
    """Text PDF protected with a user password."""
    buffer = io.BytesIO()
    with pikepdf.new() as pdf:
        _add_text_page(pdf, ["Confidential quarterly figures"])
        pdf.save(
            buffer,
            encryption=pikepdf.Encryption(owner="owner-secret", user="user-secret"),
        )
    return buffer.getvalue()


REPORT_PAGE = [
    "Annual Accessibility Report",
    "1. Introduction",
    "This report describes the accessibility programme.",
    "Figure 1 shows the chart of audit results by quarter.",
    "Region | Audits | Passed",
    "North | 12 | 10",
    "South | 8 | 6",
    "Click here to download the report.",
    "Contact us at help@example.org for details.",
]


def report_pdf(**kwargs) -> bytes:
    """A small multi-feature document: headings, image, table, links."""
    return text_pdf([REPORT_PAGE], **kwargs)
