"""Output writers.

This module renders the intermediate model as JSON, plain text, CSV and the
spreadsheet report, applying the conversion flags per field.
"""

from formatflex.output.json_writer import write_json
from formatflex.output.report_writer import write_report
from formatflex.output.text_writer import write_csv, write_text

__all__ = [
    "write_csv",
    "write_json",
    "write_report",
    "write_text",
]
