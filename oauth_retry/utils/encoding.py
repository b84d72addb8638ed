"""Base64 JSON encoding for values carried through OAuth redirects."""

import base64
import json
from typing import Any


def encode_state(value: Any) -> str:
    """Encode a JSON-serializable value as base64 text.

    Args:
        value: Any JSON-serializable value (typically a dict)

    Returns:
        Standard base64 encoding of the compact JSON representation
    """
    payload = json.dumps(value, separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_state(encoded: str) -> Any:
    """Decode a value produced by encode_state.

    Raises:
        ValueError: If the text is not base64-encoded JSON
    """
    try:
        payload = base64.b64decode(encoded.encode("ascii"), validate=True)
        return json.loads(payload.decode("utf-8"))
    except (ValueError, UnicodeError) as e:
        raise ValueError(f"Invalid encoded state: {e}") from e
