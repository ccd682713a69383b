from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from openpyxl import Workbook

from formatflex.models import ConversionConfig
from formatflex.utils.logging import clear_context


@pytest.fixture(autouse=True)
def _clear_log_context() -> None:
    """Start every test without leftover logging context."""
    clear_context()


@pytest.fixture
def write_text_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a text file into tmp_path."""

    def _write(name: str, content: str, encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_bytes(content.encode(encoding))
        return path

    return _write


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Factory saving a workbook built from ``{sheet_name: rows}``."""

    def _write(sheets: dict[str, list[list[object]]], name: str = "book.xlsx") -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, rows in sheets.items():
            ws = wb.create_sheet(sheet_name)
            for row in rows:
                ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


@pytest.fixture
def default_config() -> ConversionConfig:
    return ConversionConfig()
