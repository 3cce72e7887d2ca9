"""
Call log endpoints (fixed `calllogs` table).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from core.store import DataStore, get_store
from records import service as records_service

TABLE = "calllogs"

router = APIRouter(prefix="/api/calllogs")


@router.post("", status_code=201)
async def create_call_log(
    payload: Any = Body(default=None),
    store: DataStore = Depends(get_store),
) -> JSONResponse:
    # The body is the row payload as posted; the store accepts or rejects it.
    return await records_service.insert_rows(
        store,
        table=TABLE,
        rows=payload,
        message="Call log created successfully",
    )


@router.get("")
async def list_call_logs(store: DataStore = Depends(get_store)) -> JSONResponse:
    """
    All call logs, newest first.
    """
    return await records_service.list_rows(
        store,
        table=TABLE,
        order_by="created_at",
        descending=True,
        include_count=True,
    )


@router.get("/{log_id}")
async def get_call_log(log_id: str, store: DataStore = Depends(get_store)) -> JSONResponse:
    # Zero or several matches surface as the backend's single-row error (400).
    return await records_service.get_row(store, table=TABLE, column="id", value=log_id)
