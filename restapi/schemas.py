"""Request models and response serialization for user accounts."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict

ACCOUNT_FIELDS = ("firstname", "lastname", "email", "dob", "bio")


class UserPayload(BaseModel):
    """Account fields as sent by a client. Every field may be absent."""

    model_config = ConfigDict(extra="ignore")

    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[str] = None
    bio: Optional[str] = None

    def supplied(self) -> dict[str, str]:
        """Fields that carry a value (explicit nulls count as absent)."""
        return {k: v for k, v in self.model_dump(include=set(ACCOUNT_FIELDS)).items() if v is not None}


def _encode(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def serialize_user(document: Mapping[str, Any]) -> dict[str, Any]:
    """Stored document -> JSON-ready dict (_id as hex string, ISO datetimes)."""
    return {key: _encode(value) for key, value in document.items()}
