"""Safe accessors for untyped xcresulttool JSON.

xcresulttool output has no fixed schema across Xcode versions, so every
traversal step goes through these helpers instead of indexing directly.
The legacy object format wraps scalars as ``{"_value": x}`` and arrays as
``{"_values": [...]}``.
"""

from __future__ import annotations

import math
from typing import Any


def dig(data: Any, *keys: str | int) -> Any:
    """Follow a path of dict keys / list indexes, returning None on any miss."""
    current = data
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def as_list(value: Any) -> list:
    """Return value if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a duration or count
    return isinstance(value, int | float) and not isinstance(value, bool)


def wrapped_value(data: Any, *keys: str | int) -> Any:
    """Unwrap ``{"_value": x}`` found at the given path."""
    return dig(data, *keys, "_value")


def wrapped_values(data: Any, *keys: str | int) -> list:
    """Unwrap ``{"_values": [...]}`` found at the given path, defaulting to []."""
    return as_list(dig(data, *keys, "_values"))


def wrapped_str(data: Any, *keys: str | int) -> str | None:
    """Unwrap a non-empty string value, or None."""
    value = wrapped_value(data, *keys)
    if isinstance(value, str) and value:
        return value
    return None


def wrapped_number(data: Any, *keys: str | int, default: float = 0.0) -> float:
    """Unwrap a numeric value; numeric strings are accepted, anything else is default."""
    value = wrapped_value(data, *keys)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return default
    if is_number(value) and math.isfinite(value):
        return float(value)
    return default
