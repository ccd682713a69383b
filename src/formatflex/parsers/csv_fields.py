"""CSV field parsing.

Splits delimited text into rows of cells with the csv module. The delimiter
is sniffed from a sample of the text so semicolon, tab and pipe separated
files are read as well as comma separated ones.

Records are taken one per line; a quoted field cannot span lines. Each row
keeps its source line so the CSV writer can pass it through untouched.
"""

import csv

from formatflex.document import Document, Row
from formatflex.parsers.lines import split_lines
from formatflex.utils.exceptions import InvalidSyntaxError
from formatflex.utils.logging import get_logger

logger = get_logger(__name__)

CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_CHARS = 8192
DEFAULT_DELIMITER = ","


def detect_delimiter(text: str) -> str:
    """Detect the delimiter used in CSV text.

    Args:
        text: CSV content.

    Returns:
        Detected delimiter character, or a comma when detection fails.
    """
    sample = text[:SNIFF_SAMPLE_CHARS]
    if not any(candidate in sample for candidate in CANDIDATE_DELIMITERS):
        return DEFAULT_DELIMITER
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        logger.debug("CSV delimiter detection failed, defaulting to comma")
        return DEFAULT_DELIMITER


def _ensure_field_size_limit(length: int) -> None:
    # A field is never longer than the line holding it
    if length > csv.field_size_limit():
        csv.field_size_limit(length)


def split_fields(line: str, delimiter: str) -> list[str]:
    """Split one line into its fields.

    Raises:
        csv.Error: If the csv module rejects the line.
    """
    _ensure_field_size_limit(len(line))
    return next(csv.reader([line], delimiter=delimiter), [])


def parse_csv(text: str, delimiter: str | None = None) -> Document:
    """Parse CSV text into a one-sheet document.

    Args:
        text: Decoded CSV content.
        delimiter: Field delimiter; sniffed from the text when omitted.

    Returns:
        Document with one row per non-empty line. The detected delimiter is
        stored in ``metadata["delimiter"]``.

    Raises:
        InvalidSyntaxError: If the csv module rejects a line.
    """
    delimiter = delimiter or detect_delimiter(text)

    rows: list[Row] = []
    for line_number, line in enumerate(split_lines(text), start=1):
        try:
            fields = split_fields(line, delimiter)
        except csv.Error as e:
            raise InvalidSyntaxError(
                f"Failed to parse CSV: {e}", line=line_number
            ) from e
        rows.append(Row.from_values(fields, source=line))

    logger.debug("Parsed CSV", rows=len(rows), delimiter=repr(delimiter))
    document = Document.single(rows)
    document.metadata["delimiter"] = delimiter
    return document
