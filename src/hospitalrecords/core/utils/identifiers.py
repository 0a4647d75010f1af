"""
Document identifier validation.

MongoDB assigns every document a 12-byte ObjectId whose textual form is a
24-character hexadecimal string. Only that textual form is accepted from
callers.
"""

import re
from typing import Any

from bson import ObjectId

_OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def is_valid_id(value: Any) -> bool:
    """Return True when ``value`` is the 24-hex-character form of an ObjectId."""
    if not isinstance(value, str):
        return False
    return _OBJECT_ID_PATTERN.fullmatch(value) is not None


def to_object_id(value: str) -> ObjectId:
    """Convert a validated identifier string to an ObjectId."""
    if not is_valid_id(value):
        raise ValueError(f"Not a valid document identifier: {value!r}")
    return ObjectId(value)
