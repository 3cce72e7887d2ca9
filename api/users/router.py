"""
User endpoints (fixed `users` table).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from core.store import DataStore, get_store
from records import service as records_service

router = APIRouter(prefix="/api/users")


@router.post("", status_code=201)
async def create_user(
    payload: Any = Body(default=None),
    store: DataStore = Depends(get_store),
) -> JSONResponse:
    return await records_service.insert_rows(
        store,
        table="users",
        rows=payload,
        message="User created successfully",
    )
