"""Source readers.

The conversion orchestrator lives in ``formatflex.services.converter`` and
is imported from there.
"""

from formatflex.services.source_reader import read_raw, read_text
from formatflex.services.spreadsheet_reader import SpreadsheetArchive, open_archive

__all__ = [
    "SpreadsheetArchive",
    "open_archive",
    "read_raw",
    "read_text",
]
