"""Parsers from source text or spreadsheet cells to the intermediate model."""

from formatflex.parsers.csv_fields import parse_csv
from formatflex.parsers.lines import parse_lines, parse_raw
from formatflex.parsers.spreadsheet import parse_workbook
from formatflex.parsers.yaml_document import parse_yaml

__all__ = [
    "parse_csv",
    "parse_lines",
    "parse_raw",
    "parse_workbook",
    "parse_yaml",
]
