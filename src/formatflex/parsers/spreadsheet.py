"""Spreadsheet cells to intermediate model.

Every sheet of an open archive becomes one Sheet of the document, in
workbook order. A sheet that cannot be resolved or read becomes a
placeholder carrying a diagnostic row; its siblings are still parsed.
"""

from __future__ import annotations

import datetime
import math
from typing import Any

from formatflex.document import Document, Row, Sheet
from formatflex.services.spreadsheet_reader import SpreadsheetArchive
from formatflex.utils.exceptions import SheetUnavailableError
from formatflex.utils.logging import ProgressTracker, get_logger

logger = get_logger(__name__)


def parse_workbook(archive: SpreadsheetArchive) -> Document:
    """Parse every sheet of an open workbook.

    Args:
        archive: Open spreadsheet archive.

    Returns:
        Document with one Sheet per workbook sheet.
    """
    sheet_refs = archive.list_sheets()
    tracker = ProgressTracker(logger, "Parsing sheets", total=len(sheet_refs))
    sheets: list[Sheet] = []

    for sheet_id, name in sheet_refs:
        sheets.append(_parse_sheet(archive, sheet_id, name))
        tracker.update(details=name)

    tracker.complete()
    failed = [sheet.name for sheet in sheets if sheet.is_placeholder]
    return Document(
        sheets=sheets,
        metadata={
            "sheet_names": [name for _, name in sheet_refs],
            "failed_sheets": failed,
        },
    )


def _parse_sheet(archive: SpreadsheetArchive, sheet_id: int, name: str) -> Sheet:
    """Parse one sheet, containing its failures."""
    try:
        raw_rows = archive.read_sheet_rows(sheet_id)
    except SheetUnavailableError as e:
        logger.warning("Skipping worksheet", sheet=name, reason=e.reason)
        return Sheet.placeholder(name, f"Skipped worksheet '{name}': {e.reason}")
    except Exception as e:  # noqa: BLE001 - one bad sheet must not abort the rest
        logger.warning("Failed to parse worksheet", sheet=name, error=str(e))
        return Sheet.placeholder(name, f"Error parsing worksheet '{name}': {e}")

    rows = [
        Row.from_values(resolve_cell_value(cell) for cell in raw_row)
        for raw_row in raw_rows
    ]
    return Sheet(name=name, rows=rows)


def resolve_cell_value(cell: Any) -> str | None:
    """Resolve a read-only cell to its text, or None when it holds no value.

    String cells already carry the text of their shared or inline string.
    Typed values are rendered the way a spreadsheet shows them.
    """
    return format_cell_value(getattr(cell, "value", None))


def format_cell_value(value: Any) -> str | None:
    """Render a stored cell value as text."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)
