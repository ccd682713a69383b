"""Spreadsheet archive reader built on openpyxl.

The workbook is opened in read-only mode so worksheet XML is only parsed
when a sheet's rows are requested. Shared and inline string tables are
resolved by openpyxl while the rows are read.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from types import TracebackType
from typing import Any, BinaryIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet._read_only import ReadOnlyWorksheet

from formatflex.utils.exceptions import (
    CorruptArchiveError,
    SheetUnavailableError,
    SourceNotFoundError,
    UnreadableSourceError,
)
from formatflex.utils.logging import get_logger

logger = get_logger(__name__)

# Raised by openpyxl/zipfile/ElementTree for containers that are not XLSX
ARCHIVE_ERRORS: tuple[type[BaseException], ...] = (
    zipfile.BadZipFile,
    InvalidFileException,
    KeyError,
    ValueError,
    TypeError,
    SyntaxError,
    EOFError,
)


class SpreadsheetArchive:
    """An open XLSX workbook.

    Use as a context manager, or call ``close()``; closing releases the
    zip file and the handle it was read from, and is safe to repeat.
    """

    def __init__(
        self,
        workbook: Workbook,
        file_path: str,
        handle: BinaryIO | None = None,
    ) -> None:
        self._workbook = workbook
        self._handle = handle
        self.file_path = file_path
        self._closed = False

    def __enter__(self) -> SpreadsheetArchive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the archive handle."""
        if self._closed:
            return
        try:
            self._workbook.close()
        finally:
            if self._handle is not None:
                self._handle.close()
        self._closed = True
        logger.debug("Closed spreadsheet archive", file=Path(self.file_path).name)

    def list_sheets(self) -> list[tuple[int, str]]:
        """List sheets in workbook order.

        Returns:
            ``(sheet_id, sheet_name)`` pairs; the id is the 0-based position.
        """
        return list(enumerate(self._workbook.sheetnames))

    def read_sheet_rows(self, sheet_id: int) -> list[tuple[Any, ...]]:
        """Read the rows of one sheet.

        Rows are ragged: each row ends at its last stored cell. Rows with
        no stored cells are left out.

        Args:
            sheet_id: Position from ``list_sheets``.

        Returns:
            Rows of openpyxl read-only cells.

        Raises:
            SheetUnavailableError: If the entry is not a worksheet.
        """
        name = self._workbook.sheetnames[sheet_id]
        sheet = self._workbook[name]
        if not isinstance(sheet, ReadOnlyWorksheet):
            raise SheetUnavailableError(name)

        # Ignore the stored dimension so rows are not padded to a fixed width
        sheet.reset_dimensions()
        rows = [tuple(row) for row in sheet.iter_rows() if row]
        logger.debug("Read sheet rows", sheet=name, rows=len(rows))
        return rows


def open_archive(file_path: str | Path) -> SpreadsheetArchive:
    """Open an XLSX file for reading.

    Args:
        file_path: Path to the workbook.

    Returns:
        An open SpreadsheetArchive; the caller is responsible for closing it.

    Raises:
        SourceNotFoundError: If the path does not exist.
        UnreadableSourceError: If the path cannot be opened.
        CorruptArchiveError: If the file is not a readable XLSX container.
    """
    path = Path(file_path)
    if not path.exists():
        raise SourceNotFoundError(str(file_path))
    if path.is_dir():
        raise UnreadableSourceError(
            f"Path is a directory, not a file: {file_path}", file_path=str(file_path)
        )

    # openpyxl only checks the file extension when given a path
    try:
        handle = path.open("rb")
    except OSError as e:
        raise UnreadableSourceError(
            f"Could not open {file_path}: {e.strerror or e}", file_path=str(file_path)
        ) from e

    try:
        workbook = load_workbook(handle, read_only=True, data_only=True)
    except ARCHIVE_ERRORS as e:
        handle.close()
        raise CorruptArchiveError(
            f"Failed to open XLSX file: {e}", file_path=str(file_path)
        ) from e
    except OSError as e:
        handle.close()
        raise UnreadableSourceError(
            f"Could not read {file_path}: {e.strerror or e}", file_path=str(file_path)
        ) from e

    logger.debug(
        "Opened spreadsheet archive",
        file=path.name,
        sheets=len(workbook.sheetnames),
    )
    return SpreadsheetArchive(workbook, str(file_path), handle)
