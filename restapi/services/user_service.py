"""User account use cases (validation, CRUD, error classification)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from bson import ObjectId
from pydantic import ValidationError

from restapi.domain.identifiers import to_object_id
from restapi.repositories.user_repository import UserRepository
from restapi.schemas import ACCOUNT_FIELDS, UserPayload

logger = logging.getLogger(__name__)


class UserError(Exception):
    """Base exception for the user workflow; carries the HTTP status to answer with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserValidationError(UserError):
    """Raised when a request body is missing fields or carries bad values."""

    status_code = 400

    def __init__(self, message: str, fields: tuple[str, ...] | list[str] = ()):
        super().__init__(message)
        self.fields = list(fields)


class InvalidUserIdError(UserError):
    status_code = 400

    def __init__(self, message: str = "Invalid user ID"):
        super().__init__(message)


class UserNotFoundError(UserError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


def parse_payload(payload: Any) -> UserPayload:
    if not isinstance(payload, Mapping):
        raise UserValidationError("Request body must be an object")
    try:
        return UserPayload.model_validate(dict(payload))
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise UserValidationError("Fields must be strings", fields) from exc


def build_update_document(payload: Any) -> dict[str, str]:
    """
    Return the subset of account fields supplied in ``payload``.

    Keys outside the account fields are dropped; None means "not supplied";
    an empty string is rejected since it would break the creation invariant.
    """
    values = parse_payload(payload).supplied()
    empty = [name for name in ACCOUNT_FIELDS if values.get(name) == ""]
    if empty:
        raise UserValidationError("Fields cannot be empty", empty)
    return values


class UserService:
    """Provides user account CRUD on top of a UserRepository."""

    def __init__(self, repository: UserRepository, clock: Callable[[], datetime] | None = None) -> None:
        self.repository = repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        return self._clock()

    def _object_id(self, user_id: str) -> ObjectId:
        try:
            return to_object_id(user_id)
        except ValueError as exc:
            raise InvalidUserIdError() from exc

    def create_user(self, payload: Any) -> ObjectId:
        values = parse_payload(payload).supplied()
        missing = [name for name in ACCOUNT_FIELDS if not values.get(name)]
        if missing:
            raise UserValidationError("All fields are required", missing)
        now = self._now()
        document = {name: values[name] for name in ACCOUNT_FIELDS}
        document["createdAt"] = now
        document["updatedAt"] = now
        inserted_id = self.repository.insert_user(document)
        logger.info("user created id=%s", inserted_id)
        return inserted_id

    def list_users(self) -> list[dict[str, Any]]:
        return self.repository.list_users()

    def get_user(self, user_id: str) -> dict[str, Any]:
        oid = self._object_id(user_id)
        document = self.repository.get_user(oid)
        if document is None:
            raise UserNotFoundError()
        return document

    def update_user(self, user_id: str, payload: Any) -> dict[str, Any]:
        oid = self._object_id(user_id)
        try:
            values = build_update_document(payload)
        except UserValidationError:
            # unknown ids answer 404 whatever the body holds
            if self.repository.get_user(oid) is None:
                raise UserNotFoundError() from None
            raise
        if not values:
            # nothing to change; still answer 404 for unknown ids
            document = self.repository.get_user(oid)
        else:
            values["updatedAt"] = self._now()
            document = self.repository.update_user(oid, values)
        if document is None:
            raise UserNotFoundError()
        if values:
            logger.info("user updated id=%s fields=%s", oid, sorted(k for k in values if k != "updatedAt"))
        return document

    def delete_user(self, user_id: str) -> None:
        oid = self._object_id(user_id)
        if self.repository.delete_user(oid) == 0:
            raise UserNotFoundError()
        logger.info("user deleted id=%s", oid)

    def delete_all_users(self) -> int:
        count = self.repository.delete_all_users()
        logger.info("all users deleted count=%d", count)
        return count
