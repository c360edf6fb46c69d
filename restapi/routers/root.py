from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["root"])


@router.get("/")
def root():
    return {"message": "RESTAPI root"}
