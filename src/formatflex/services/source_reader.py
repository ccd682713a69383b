"""Raw source reading with encoding detection.

Reads a file as bytes and decodes it to text, detecting the encoding with
chardet and falling back to a fixed list of common encodings. Line endings
are normalised to ``\\n`` so every parser sees the same text regardless of
the platform that wrote the file.
"""

from pathlib import Path

import chardet

from formatflex.utils.exceptions import SourceNotFoundError, UnreadableSourceError
from formatflex.utils.logging import get_logger

logger = get_logger(__name__)

# Common encodings to try if chardet fails
FALLBACK_ENCODINGS = ["utf-8", "latin-1", "cp1252"]

# Minimum confidence threshold for encoding detection
MIN_ENCODING_CONFIDENCE = 0.5

UTF8_BOM = b"\xef\xbb\xbf"


def read_raw(file_path: str | Path) -> bytes:
    """Read a source file as bytes.

    Args:
        file_path: Path to the file.

    Returns:
        The file content.

    Raises:
        SourceNotFoundError: If the path does not exist.
        UnreadableSourceError: If the path is not a readable file.
    """
    path = Path(file_path)
    if not path.exists():
        raise SourceNotFoundError(str(file_path))
    if path.is_dir():
        raise UnreadableSourceError(
            f"Path is a directory, not a file: {file_path}", file_path=str(file_path)
        )

    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        # Removed between the existence check and the read
        raise SourceNotFoundError(str(file_path)) from e
    except OSError as e:
        raise UnreadableSourceError(
            f"Could not read {file_path}: {e.strerror or e}", file_path=str(file_path)
        ) from e

    logger.debug("Read source", file=path.name, bytes=len(content))
    return content


def detect_encoding(content: bytes) -> tuple[str, float]:
    """Detect the encoding of byte content.

    Args:
        content: File content as bytes.

    Returns:
        Tuple of (encoding_name, confidence_score).
    """
    if not content:
        return "utf-8", 1.0
    if content.startswith(UTF8_BOM):
        return "utf-8-sig", 1.0

    result = chardet.detect(content)
    encoding = result.get("encoding")
    confidence = result.get("confidence", 0.0) or 0.0

    if encoding and confidence >= MIN_ENCODING_CONFIDENCE:
        encoding = normalize_encoding(encoding)
        logger.debug(f"Detected encoding: {encoding} (confidence: {confidence:.2f})")
        return encoding, confidence

    for fallback in FALLBACK_ENCODINGS:
        try:
            content.decode(fallback)
            logger.debug(f"Using fallback encoding: {fallback}")
            return fallback, 0.5
        except (UnicodeDecodeError, LookupError):
            continue

    # latin-1 accepts any byte sequence
    logger.warning("Could not detect encoding, falling back to latin-1")
    return "latin-1", 0.3


def normalize_encoding(encoding: str) -> str:
    """Normalize an encoding name from chardet to a Python codec name.

    Args:
        encoding: Encoding name from chardet.

    Returns:
        Normalized encoding name.
    """
    encoding = encoding.lower().replace("-", "_").replace(" ", "_")

    normalizations = {
        "utf_8": "utf-8",
        "utf_8_sig": "utf-8-sig",
        "utf_16": "utf-16",
        "utf_32": "utf-32",
        "ascii": "utf-8",
        "iso_8859_1": "latin-1",
        "iso8859_1": "latin-1",
        "latin_1": "latin-1",
        "latin1": "latin-1",
        "cp1252": "cp1252",
        "windows_1252": "cp1252",
    }

    return normalizations.get(encoding, encoding.replace("_", "-"))


def decode_content(content: bytes, encoding: str, source: str | None = None) -> str:
    """Decode byte content to text with normalized line endings.

    Args:
        content: File content as bytes.
        encoding: Encoding to try first.
        source: Source identifier for error messages.

    Returns:
        Decoded text.

    Raises:
        UnreadableSourceError: If no encoding can decode the content.
    """
    try:
        text = content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        for fallback in FALLBACK_ENCODINGS:
            try:
                text = content.decode(fallback)
                break
            except (UnicodeDecodeError, LookupError):
                continue
        else:
            raise UnreadableSourceError(
                f"Failed to decode content with encoding {encoding}: {e}",
                file_path=source,
                encoding=encoding,
            ) from e

    text = text.removeprefix("\ufeff")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def read_text(file_path: str | Path) -> str:
    """Read a source file and decode it to text.

    Args:
        file_path: Path to the file.

    Returns:
        Decoded text with ``\\n`` line endings.

    Raises:
        SourceNotFoundError: If the path does not exist.
        UnreadableSourceError: If the file cannot be read or decoded.
    """
    content = read_raw(file_path)
    encoding, confidence = detect_encoding(content)
    text = decode_content(content, encoding, str(file_path))
    logger.debug(
        "Decoded source",
        encoding=encoding,
        confidence=f"{confidence:.2f}",
        chars=len(text),
    )
    return text
