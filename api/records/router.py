"""
Generic record endpoints: the table name comes from the request.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from core.store import DataStore, get_store

from . import service

router = APIRouter(prefix="/api")


@router.post("/insert", status_code=201)
async def insert(
    payload: Any = Body(default=None),
    store: DataStore = Depends(get_store),
) -> JSONResponse:
    """
    Insert `data` (one row or a list of rows) into `table` and return the inserted rows.
    """
    # Anything but an object carries neither field.
    fields = payload if isinstance(payload, dict) else {}
    table = fields.get("table")
    data = fields.get("data")
    if not table or not data:
        return service.client_error(service.MISSING_FIELDS_MESSAGE)

    # A present non-string table is forwarded as text; the backend decides.
    table = table.strip() if isinstance(table, str) else str(table)
    if not table:
        return service.client_error(service.MISSING_FIELDS_MESSAGE)

    forbidden = service.table_forbidden(table)
    if forbidden is not None:
        return forbidden

    return await service.insert_rows(store, table=table, rows=data)


@router.get("/data/{table}")
async def list_table(
    table: str,
    store: DataStore = Depends(get_store),
) -> JSONResponse:
    forbidden = service.table_forbidden(table)
    if forbidden is not None:
        return forbidden

    return await service.list_rows(store, table=table)
