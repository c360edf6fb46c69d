"""Domain helpers for user identifier validation."""
from __future__ import annotations

import re

from bson import ObjectId

USER_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def is_valid_user_id(value: str | None) -> bool:
    """Return True when value is the 24-hex string form of an ObjectId."""
    if not value or not isinstance(value, str):
        return False
    return bool(USER_ID_PATTERN.fullmatch(value)) and ObjectId.is_valid(value)


def to_object_id(value: str) -> ObjectId:
    """Convert a validated identifier; raises ValueError for anything else."""
    if not is_valid_user_id(value):
        raise ValueError(f"invalid user id: {value!r}")
    return ObjectId(value)
