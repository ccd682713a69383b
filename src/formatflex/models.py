"""Pydantic models describing a conversion request."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """Output formats a conversion can target."""

    JSON = "JSON"
    TXT = "TXT"
    YAML = "YAML"
    CSV = "CSV"
    XLSX = "XLSX"

    @classmethod
    def parse(cls, value: "OutputFormat | str") -> "OutputFormat":
        """Resolve a format from an enum member or a case-insensitive name.

        Args:
            value: Format member or name such as "csv" or "Json".

        Returns:
            The matching OutputFormat.

        Raises:
            ValueError: If the name does not match any format.
        """
        if isinstance(value, OutputFormat):
            return value
        key = value.strip().upper()
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unsupported output format: {value!r}. Must be one of: {valid}"
            ) from None


class ConversionConfig(BaseModel):
    """Behavioral flags applied to a single conversion.

    The flags are honoured per field by every writer. ``no_header`` is the
    exception: the TXT and CSV writers reuse it to join rows with a comma
    instead of a newline, the other writers ignore it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    trim: bool = Field(
        default=False, description="Strip leading/trailing whitespace per field"
    )
    parse_types: bool = Field(
        default=False,
        description="Reserved for numeric/boolean coercion; currently a no-op",
    )
    ignore_empty: bool = Field(
        default=False, description="Drop empty fields and rows left empty"
    )
    no_header: bool = Field(
        default=False,
        description="TXT/CSV: join rows with ',' instead of a newline",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for logging."""
        return self.model_dump()


# Flags each output format reads from ConversionConfig
FORMAT_FLAGS: dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.JSON: ("trim", "ignore_empty"),
    OutputFormat.TXT: ("trim", "ignore_empty", "no_header"),
    OutputFormat.YAML: ("trim", "ignore_empty"),
    OutputFormat.CSV: ("trim", "parse_types", "ignore_empty", "no_header"),
    OutputFormat.XLSX: ("trim", "ignore_empty"),
}
