"""Human-readable report of spreadsheet contents.

One section per sheet, in workbook order::

    Worksheet: <name>
    <cell>, <cell>, ...
    <blank line>

Absent cells are left out of their row. A placeholder sheet is rendered as
its diagnostic line followed by the blank separator.
"""

from formatflex.document import Document, Sheet
from formatflex.models import ConversionConfig
from formatflex.output.field_policy import apply_rows_policy

CELL_SEPARATOR = ", "


def write_report(document: Document, config: ConversionConfig) -> str:
    """Render every sheet of a document as a report.

    Args:
        document: Parsed spreadsheet document.
        config: Conversion flags; ``no_header`` has no effect here.

    Returns:
        The report text.
    """
    return "".join(render_sheet(sheet, config) for sheet in document.sheets)


def render_sheet(sheet: Sheet, config: ConversionConfig) -> str:
    """Render one report section."""
    if sheet.is_placeholder:
        return f"{sheet.diagnostic}\n\n"

    lines = [f"Worksheet: {sheet.name}"]
    for values in apply_rows_policy(sheet.rows, config):
        present = [value for value in values if value is not None]
        if config.ignore_empty and not present:
            continue
        lines.append(CELL_SEPARATOR.join(present))
    return "\n".join(lines) + "\n\n"
