"""Best-effort coercion of untyped form values.

Multipart and urlencoded submissions deliver every value as text. Each text
value is decoded as JSON when it is valid JSON and kept verbatim otherwise;
decoded containers are walked and their entries coerced the same way.
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Decoded:
    value: Any


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON and cannot be serialized back out.
    raise ValueError(f"Unsupported JSON constant {name}")


def decode_json_text(text: str) -> Decoded | None:
    """Decode ``text`` as JSON.

    Returns:
        The decoded value wrapped in :class:`Decoded`, or None when ``text``
        is not valid JSON.
    """
    try:
        return Decoded(json.loads(text, parse_constant=_reject_constant))
    except ValueError:
        return None


def coerce_value(value: Any) -> Any:
    """Coerce one submitted value."""
    if isinstance(value, str):
        decoded = decode_json_text(value)
        if decoded is None:
            return value
        value = decoded.value
        if isinstance(value, str):
            # '"42"' decodes to "42"; one level of decoding per submitted string.
            return value

    if isinstance(value, dict):
        return {key: coerce_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [coerce_value(item) for item in value]
    return value


def coerce_form_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce a flat mapping of submitted values.

    Never raises; undecodable values are returned unchanged.
    """
    return {key: coerce_value(value) for key, value in data.items()}
