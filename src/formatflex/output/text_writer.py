"""Plain text and CSV writers.

Both writers join rows with a newline. When ``no_header`` is set they join
rows with a comma instead, flattening the output onto one line.
"""

import csv
import io

from formatflex.document import Document
from formatflex.models import ConversionConfig
from formatflex.output.field_policy import apply_rows_policy
from formatflex.parsers.csv_fields import DEFAULT_DELIMITER

NEWLINE_SEPARATOR = "\n"
FLAT_SEPARATOR = ","


def row_separator(config: ConversionConfig) -> str:
    return FLAT_SEPARATOR if config.no_header else NEWLINE_SEPARATOR


def write_text(document: Document, config: ConversionConfig) -> str:
    """Render the first sheet of a document as lines of text.

    Args:
        document: Parsed document.
        config: Conversion flags.

    Returns:
        Rows joined by newlines, or by commas with ``no_header``.
    """
    rows = apply_rows_policy(document.first_sheet().rows, config)
    lines = [",".join(value or "" for value in values) for values in rows]
    return row_separator(config).join(lines)


def write_csv(document: Document, config: ConversionConfig) -> str:
    """Render the first sheet of a document as CSV.

    Without ``trim`` or ``ignore_empty`` every record is its source line,
    quoting and delimiter included. Otherwise the processed fields are
    joined again with the source delimiter and quoted only when needed.

    Args:
        document: Parsed document.
        config: Conversion flags.

    Returns:
        Records joined by newlines, or by commas with ``no_header``.
    """
    sheet = document.first_sheet()
    delimiter = document.metadata.get("delimiter", DEFAULT_DELIMITER)
    if not (config.trim or config.ignore_empty):
        records = [
            row.source
            if row.source is not None
            else format_record([cell.text for cell in row.cells], delimiter)
            for row in sheet.rows
        ]
    else:
        records = [
            format_record([value or "" for value in values], delimiter)
            for values in apply_rows_policy(sheet.rows, config)
        ]
    return row_separator(config).join(records)


def format_record(values: list[str], delimiter: str = DEFAULT_DELIMITER) -> str:
    """Format one record with minimal quoting."""
    # csv.writer spells a lone empty field as "" to tell it from a blank line
    if not any(values) and len(values) <= 1:
        return ""
    buffer = io.StringIO()
    csv.writer(buffer, delimiter=delimiter, lineterminator="\n").writerow(values)
    return buffer.getvalue().removesuffix("\n")
