"""FormatFlex - convert TXT, CSV, YAML, JSON and XLSX files."""

from formatflex.models import ConversionConfig, OutputFormat
from formatflex.services.converter import (
    ConversionResult,
    ConversionState,
    FormatConverter,
    convert,
)
from formatflex.utils.exceptions import ConversionError

__all__ = [
    "ConversionConfig",
    "ConversionError",
    "ConversionResult",
    "ConversionState",
    "FormatConverter",
    "OutputFormat",
    "convert",
]
__version__ = "0.1.0"


def main() -> None:
    """Run the FormatFlex command line."""
    from formatflex.cli import main as cli_main

    cli_main()
