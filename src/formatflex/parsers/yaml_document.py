"""YAML decoding into the tree-shaped intermediate value.

Uses PyYAML's safe loader. Only mappings and sequences are accepted at the
top level; nested values are passed through as they are, after scalars the
JSON writer cannot represent directly (dates, binary, sets) have been turned
into text or lists.
"""

import base64
import datetime
from typing import Any

import yaml

from formatflex.document import Value
from formatflex.utils.exceptions import InvalidSyntaxError, UnsupportedShapeError
from formatflex.utils.logging import get_logger

logger = get_logger(__name__)


def parse_yaml(text: str) -> Value:
    """Decode YAML text.

    Args:
        text: YAML source.

    Returns:
        The decoded mapping or sequence.

    Raises:
        InvalidSyntaxError: If the text is not valid YAML.
        UnsupportedShapeError: If the document is empty or a bare scalar.
    """
    try:
        loaded = yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark
        line = mark.line + 1 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        problem = e.problem or str(e)
        position = f" (line {line}, column {column})" if line is not None else ""
        raise InvalidSyntaxError(
            f"Failed to parse YAML: {problem}{position}", line=line, column=column
        ) from e
    except yaml.YAMLError as e:
        raise InvalidSyntaxError(f"Failed to parse YAML: {e}") from e

    if not isinstance(loaded, (dict, list)):
        found = type(loaded).__name__
        raise UnsupportedShapeError(
            f"YAML format is not valid for conversion: top-level value is {found},"
            " expected a mapping or a sequence",
            found_type=found,
        )

    value = normalize_value(loaded)
    logger.debug("Parsed YAML", top_level=type(value).__name__, size=len(value))
    return value


def normalize_value(value: Any) -> Value:
    """Convert a PyYAML value into the tree model.

    Args:
        value: Value produced by the safe loader.

    Returns:
        Equivalent value built only from dict, list, str, int, float, bool
        and None.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return normalize_mapping(value)
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [normalize_value(item) for item in sorted(value, key=str)]
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return str(value)


def normalize_mapping(mapping: dict[Any, Any]) -> dict[str, Value]:
    """Convert a mapping, rendering every key as text.

    Raises:
        UnsupportedShapeError: If two keys render to the same text, such as
            the integer ``1`` and the string ``"1"``.
    """
    result: dict[str, Value] = {}
    for key, item in mapping.items():
        text_key = normalize_key(key)
        if text_key in result:
            raise UnsupportedShapeError(
                f"YAML format is not valid for conversion: mapping keys collide"
                f" as text: {text_key!r}",
                found_type="mapping",
            )
        result[text_key] = normalize_value(item)
    return result


def normalize_key(key: Any) -> str:
    """Render a mapping key as text the way YAML would spell it."""
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    normalized = normalize_value(key)
    return normalized if isinstance(normalized, str) else str(normalized)
