"""JSON serialization of tree values."""

import json

from formatflex.document import Value
from formatflex.utils.exceptions import SerializationFailureError
from formatflex.utils.logging import get_logger

logger = get_logger(__name__)

JSON_INDENT = 2


def write_json(value: Value) -> str:
    """Serialize a value as pretty-printed JSON.

    Mapping keys keep their source order. Non-ASCII text is written as is.

    Args:
        value: Tree value to serialize.

    Returns:
        JSON text.

    Raises:
        SerializationFailureError: If the value holds something JSON cannot
            represent, such as NaN or infinity.
    """
    try:
        output = json.dumps(
            value,
            indent=JSON_INDENT,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationFailureError(
            f"Failed to serialize to JSON: {e}", output_format="JSON"
        ) from e

    logger.debug("Serialized JSON", chars=len(output))
    return output
