"""Per-field application of the conversion flags.

Every writer routes its fields through these helpers so ``trim``,
``ignore_empty`` and ``parse_types`` mean the same thing in every format.
"""

from collections.abc import Iterable

from formatflex.document import Row, Value
from formatflex.models import ConversionConfig


def coerce_field(text: str) -> str:
    """Numeric/boolean coercion hook.

    Returns the text unchanged until coercion rules are defined.
    """
    return text


def apply_field_policy(value: str | None, config: ConversionConfig) -> str | None:
    """Apply ``trim`` and ``parse_types`` to one field.

    Args:
        value: Field text, or None for an absent value.
        config: Conversion flags.

    Returns:
        The processed text, None stays None.
    """
    if value is None:
        return None
    text = value.strip() if config.trim else value
    if config.parse_types:
        text = coerce_field(text)
    return text


def apply_row_policy(
    values: Iterable[str | None], config: ConversionConfig
) -> list[str | None]:
    """Apply the field policy to a row, dropping empty fields on request.

    Remaining fields shift left when ``ignore_empty`` removes one.
    """
    result: list[str | None] = []
    for value in values:
        text = apply_field_policy(value, config)
        if config.ignore_empty and not text:
            continue
        result.append(text)
    return result


def apply_rows_policy(
    rows: Iterable[Row], config: ConversionConfig
) -> list[list[str | None]]:
    """Apply the field policy to every row.

    With ``ignore_empty`` a row left without fields is dropped as well.
    """
    result: list[list[str | None]] = []
    for row in rows:
        values = apply_row_policy(row.values(), config)
        if config.ignore_empty and not values:
            continue
        result.append(values)
    return result


def apply_text_policy(text: str, config: ConversionConfig) -> str:
    """Apply the field policy line by line to a block of text.

    Lines are separated by ``\\n`` only. The text is returned untouched
    when neither ``trim`` nor ``ignore_empty`` is set.
    """
    if not (config.trim or config.ignore_empty):
        return text
    lines = [Row.from_values([line]) for line in text.split("\n")]
    return "\n".join(
        values[0] or "" for values in apply_rows_policy(lines, config)
    )


def apply_value_policy(value: Value, config: ConversionConfig) -> Value:
    """Apply the field policy to a tree value.

    String scalars are trimmed; with ``ignore_empty`` mapping entries and
    sequence items that are None, empty strings or containers left empty
    are pruned. The top-level container itself is always kept.
    """
    if isinstance(value, str):
        return apply_field_policy(value, config)
    if isinstance(value, dict):
        result_map: dict[str, Value] = {}
        for key, item in value.items():
            processed = apply_value_policy(item, config)
            if config.ignore_empty and _is_empty(processed):
                continue
            result_map[key] = processed
        return result_map
    if isinstance(value, list):
        result_list: list[Value] = []
        for item in value:
            processed = apply_value_policy(item, config)
            if config.ignore_empty and _is_empty(processed):
                continue
            result_list.append(processed)
        return result_list
    return value


def _is_empty(value: Value) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False
