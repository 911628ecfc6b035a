"""
DOCX Placeholder Utilities
Finds and substitutes {{token}} markers in Word and HTML letter templates.
"""
import html
import io
import logging
import re
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from docx import Document
from docx.document import Document as DocumentObject
from docx.table import Table
from docx.text.paragraph import Paragraph

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")
SALARY_TABLE_TOKEN = "salary_table"
SALARY_TABLE_MARKER = re.compile(r"\{\{\s*salary_table\s*\}\}")


def extract_placeholders_from_text(text: str) -> set[str]:
    """Trimmed, deduplicated token names found in text."""
    return {
        match.strip()
        for match in PLACEHOLDER_PATTERN.findall(text or "")
        if match.strip()
    }


def substitute_text(text: str, values: Mapping[str, str]) -> str:
    """Replace every {{token}}; unknown tokens become empty strings."""
    return PLACEHOLDER_PATTERN.sub(lambda m: str(values.get(m.group(1).strip(), "") or ""), text)


def _table_paragraphs(table: Table) -> Iterator[Paragraph]:
    for row in table.rows:
        for cell in row.cells:
            yield from cell.paragraphs
            for nested in cell.tables:
                yield from _table_paragraphs(nested)


def iter_paragraphs(document: DocumentObject) -> Iterator[Paragraph]:
    """Body, table, header and footer paragraphs."""
    yield from document.paragraphs
    for table in document.tables:
        yield from _table_paragraphs(table)
    for section in document.sections:
        for part in (section.header, section.footer):
            if part.is_linked_to_previous:
                continue
            yield from part.paragraphs
            for table in part.tables:
                yield from _table_paragraphs(table)


def extract_placeholders(document_bytes: bytes) -> set[str]:
    """
    Extract placeholder names from a .docx package.

    Args:
        document_bytes: Raw .docx file content

    Returns:
        Set of token names. Empty when the document cannot be parsed; a
        template without detectable placeholders is still a valid upload.
    """
    try:
        document = Document(io.BytesIO(document_bytes))
        found: set[str] = set()
        for paragraph in iter_paragraphs(document):
            found |= extract_placeholders_from_text(paragraph.text)
        return found
    except Exception as e:
        logger.warning(f"Placeholder extraction failed: {e}")
        return set()


def _substitute_paragraph(paragraph: Paragraph, values: Mapping[str, str]) -> None:
    """
    Substitute inside runs when every token sits in a single run, so formatting
    is kept. When Word split a token across runs, the paragraph text is
    substituted once and collapsed into its first run.
    """
    text = paragraph.text
    if "{{" not in text:
        return
    runs = paragraph.runs
    in_runs = sum(len(PLACEHOLDER_PATTERN.findall(run.text)) for run in runs)
    if in_runs == len(PLACEHOLDER_PATTERN.findall(text)):
        for run in runs:
            if "{{" in run.text:
                run.text = substitute_text(run.text, values)
        return

    merged = substitute_text(text, values)
    if not runs:
        paragraph.add_run(merged)
        return
    runs[0].text = merged
    for run in runs[1:]:
        run.text = ""


def _insert_salary_table(document: DocumentObject, anchor: Optional[Paragraph], rows: Sequence) -> None:
    table = document.add_table(rows=len(rows) + 1, cols=3)
    try:
        table.style = "Table Grid"
    except KeyError:
        logger.debug("Template has no 'Table Grid' style; using default table style")

    for cell, heading in zip(table.rows[0].cells, ("Component", "Monthly", "Annual")):
        cell.text = heading
    for table_row, row in zip(table.rows[1:], rows):
        cells = table_row.cells
        cells[0].text = row.label
        cells[1].text = row.monthly
        cells[2].text = row.annual

    if anchor is not None:
        anchor._p.addnext(table._tbl)
        element = anchor._element
        element.getparent().remove(element)


def render_docx(
    template_bytes: bytes,
    values: Mapping[str, str],
    salary_rows: Optional[Sequence] = None,
) -> bytes:
    """
    Render a .docx template.

    Args:
        template_bytes: Template file content
        values: Placeholder dictionary; missing keys render as ""
        salary_rows: Optional SalaryRow list. Replaces a paragraph holding only
            {{salary_table}}, or is appended at the end when there is none.

    Returns:
        Rendered .docx content
    """
    document = Document(io.BytesIO(template_bytes))

    anchor = None
    if salary_rows:
        for paragraph in document.paragraphs:
            if SALARY_TABLE_MARKER.fullmatch(paragraph.text.strip()):
                anchor = paragraph
                break

    for paragraph in iter_paragraphs(document):
        if anchor is not None and paragraph._p is anchor._p:
            continue
        _substitute_paragraph(paragraph, values)

    if salary_rows:
        _insert_salary_table(document, anchor, salary_rows)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _salary_table_html(rows: Iterable) -> str:
    body = "".join(
        f"<tr><td>{html.escape(r.label)}</td><td>{html.escape(r.monthly)}</td>"
        f"<td>{html.escape(r.annual)}</td></tr>"
        for r in rows
    )
    return (
        '<table border="1" cellspacing="0" cellpadding="4">'
        "<tr><th>Component</th><th>Monthly</th><th>Annual</th></tr>"
        f"{body}</table>"
    )


def render_html(
    body_content: str,
    values: Mapping[str, str],
    salary_rows: Optional[Sequence] = None,
) -> str:
    """Substitute into an HTML body and wrap it as a standalone document."""
    escaped = {key: html.escape(str(value)) for key, value in values.items()}
    if salary_rows:
        escaped[SALARY_TABLE_TOKEN] = _salary_table_html(salary_rows)
    rendered = substitute_text(body_content or "", escaped)
    return (
        "<html><head><meta charset=\"utf-8\"></head>"
        f"<body>{rendered}</body></html>"
    )
