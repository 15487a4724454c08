"""JSON encoding shared by the record store backends."""

import json
from typing import Sequence


class CorruptCollectionError(ValueError):
    """Stored text is not a JSON array of objects."""
    pass


def encode_collection(records: Sequence[dict]) -> str:
    """Serialize a collection. Raises TypeError/ValueError if not JSON-safe."""
    return json.dumps(list(records), ensure_ascii=False, allow_nan=False)


def decode_collection(raw: str) -> list[dict]:
    """
    Parse stored text back into a collection.

    Raises:
        CorruptCollectionError: if the text is not a JSON array of objects
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CorruptCollectionError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorruptCollectionError(
            f"Expected a JSON array, got {type(data).__name__}"
        )
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise CorruptCollectionError(
                f"Item {index} is {type(item).__name__}, not an object"
            )
    return data
