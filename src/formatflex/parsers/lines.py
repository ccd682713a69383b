"""Line-oriented text parsing."""

from formatflex.document import Document, Row


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` into its non-empty lines.

    Only the newline character separates lines; form feeds, vertical tabs
    and Unicode line separators stay inside their line. Empty lines,
    including the one after a trailing newline, are left out.
    """
    return [line for line in text.split("\n") if line]


def parse_lines(text: str) -> Document:
    """Parse text into a one-sheet document with one cell per line.

    Args:
        text: Decoded source text.

    Returns:
        Document whose rows each hold the full line as a single cell.
    """
    return Document.single([Row.from_values([line]) for line in split_lines(text)])


def parse_raw(text: str) -> str:
    """Wrap the whole text as a single string value."""
    return text
