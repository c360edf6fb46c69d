from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request

from restapi.schemas import serialize_user
from restapi.services.user_service import UserService, UserValidationError

router = APIRouter(prefix="/users", tags=["users"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService not configured")
    return svc


async def read_payload(request: Request) -> Any:
    """
    Request body as a mapping; JSON and url-encoded/multipart forms are accepted.

    Bodies of any other content type are ignored and read as empty.
    """
    content_type = (request.headers.get("content-type") or "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)
    media_type = content_type.split(";", 1)[0].strip()
    if media_type != "application/json" and not media_type.endswith("+json"):
        return {}
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise UserValidationError("Malformed JSON body") from exc


@router.post("", status_code=201)
def create_user(payload: Any = Depends(read_payload), svc: UserService = Depends(get_user_service)):
    svc.create_user(payload)
    return {"success": True, "message": "New user account created"}


@router.get("")
def list_users(svc: UserService = Depends(get_user_service)):
    return [serialize_user(doc) for doc in svc.list_users()]


@router.get("/{user_id}")
def get_user(user_id: str, svc: UserService = Depends(get_user_service)):
    return serialize_user(svc.get_user(user_id))


@router.patch("/{user_id}")
def update_user(
    user_id: str,
    payload: Any = Depends(read_payload),
    svc: UserService = Depends(get_user_service),
):
    return serialize_user(svc.update_user(user_id, payload))


@router.delete("/{user_id}")
def delete_user(user_id: str, svc: UserService = Depends(get_user_service)):
    svc.delete_user(user_id)
    return {"message": "user deleted"}


@router.delete("")
def delete_all_users(svc: UserService = Depends(get_user_service)):
    svc.delete_all_users()
    return {"message": "all users deleted"}
