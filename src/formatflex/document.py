"""Dataclasses representing the normalized intermediate model."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

# Tree-shaped value produced by structured decoders (YAML, raw text)
Value: TypeAlias = (
    None | bool | int | float | str | list["Value"] | dict[str, "Value"]
)


@dataclass(frozen=True)
class Cell:
    """A single value slot. ``None`` means the source had no value."""

    value: str | None = None

    @property
    def text(self) -> str:
        """Cell text, empty for absent values."""
        return self.value if self.value is not None else ""

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass
class Row:
    """An ordered sequence of cells. Rows of one sheet may differ in length.

    ``source`` keeps the line a delimited row was split from, so writers can
    emit it unchanged when no field needs rewriting.
    """

    cells: list[Cell] = field(default_factory=list)
    source: str | None = None

    @classmethod
    def from_values(
        cls, values: Iterable[str | None], source: str | None = None
    ) -> Row:
        return cls(cells=[Cell(value) for value in values], source=source)

    def values(self) -> list[str | None]:
        return [cell.value for cell in self.cells]

    def __len__(self) -> int:
        return len(self.cells)


@dataclass
class Sheet:
    """A named, ordered sequence of rows.

    A placeholder sheet stands in for a source sheet that could not be read;
    its single row holds the diagnostic message.
    """

    name: str
    rows: list[Row] = field(default_factory=list)
    is_placeholder: bool = False

    @classmethod
    def placeholder(cls, name: str, message: str) -> Sheet:
        """Create a placeholder sheet carrying a diagnostic row."""
        return cls(name=name, rows=[Row.from_values([message])], is_placeholder=True)

    @property
    def diagnostic(self) -> str | None:
        """Diagnostic message of a placeholder sheet."""
        if not self.is_placeholder or not self.rows:
            return None
        return self.rows[0].cells[0].text

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        """Width of the widest row."""
        return max((len(row) for row in self.rows), default=0)


@dataclass
class Document:
    """A parsed source: one sheet for text sources, one per spreadsheet sheet."""

    sheets: list[Sheet]
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def single(cls, rows: list[Row], name: str = "Sheet1") -> Document:
        """Create a document holding exactly one sheet."""
        return cls(sheets=[Sheet(name=name, rows=rows)])

    @property
    def row_count(self) -> int:
        return sum(sheet.row_count for sheet in self.sheets)

    def first_sheet(self) -> Sheet:
        return self.sheets[0]
