"""
Store pass-through with the gateway's result envelopes.

Every operation is one store call with three possible outcomes:
- success        -> 200/201 {"success": true, ...}
- StoreError     -> 400 {"error": <backend message>, "details": <backend error>}
- anything else  -> 500 {"error": "Internal server error", "message": <exception>}

Client input errors (400) are answered by the routers before any of this runs.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core import settings
from core.store import DataStore, StoreError

from . import schemas

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: table and data"


def _respond(model: BaseModel, *, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(model))


def client_error(message: str, *, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return _respond(schemas.ClientErrorResponse(error=message), status_code=status_code)


def server_error(exc: Exception) -> JSONResponse:
    return _respond(
        schemas.ServerErrorResponse(message=str(exc)),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def table_forbidden(table: str) -> JSONResponse | None:
    """
    Enforce ALLOWED_TABLES for routes that take the table from the request.
    Returns None when the table may be used.
    """
    allowed = settings.allowed_tables()
    if not allowed or table in allowed:
        return None
    logger.warning("table_not_allowed table=%s", table)
    return client_error(f"Table is not allowed: {table}", status_code=status.HTTP_403_FORBIDDEN)


def _store_failure(exc: StoreError, *, action: str, table: str) -> JSONResponse:
    logger.error(
        "store_error action=%s table=%s code=%s message=%s",
        action,
        table,
        exc.code,
        exc.message,
    )
    return _respond(
        schemas.StoreErrorResponse(error=exc.message, details=exc.to_dict()),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def _server_failure(exc: Exception, *, action: str, table: str) -> JSONResponse:
    logger.exception("server_error action=%s table=%s", action, table)
    return server_error(exc)


async def insert_rows(
    store: DataStore,
    *,
    table: str,
    rows: Any,
    message: str = "Data inserted successfully",
) -> JSONResponse:
    try:
        inserted = await store.insert(table, rows)
    except StoreError as exc:
        return _store_failure(exc, action="insert", table=table)
    except Exception as exc:
        return _server_failure(exc, action="insert", table=table)

    logger.info("rows_inserted table=%s count=%s", table, len(inserted))
    return _respond(
        schemas.InsertResponse(message=message, data=inserted),
        status_code=status.HTTP_201_CREATED,
    )


async def list_rows(
    store: DataStore,
    *,
    table: str,
    order_by: str | None = None,
    descending: bool = False,
    include_count: bool = False,
) -> JSONResponse:
    try:
        rows = await store.select(table, order_by=order_by, descending=descending)
    except StoreError as exc:
        return _store_failure(exc, action="select", table=table)
    except Exception as exc:
        return _server_failure(exc, action="select", table=table)

    if include_count:
        return _respond(schemas.CountedRowsResponse(count=len(rows), data=rows))
    return _respond(schemas.RowsResponse(data=rows))


async def get_row(store: DataStore, *, table: str, column: str, value: Any) -> JSONResponse:
    try:
        row = await store.select_one(table, column=column, value=value)
    except StoreError as exc:
        return _store_failure(exc, action="select_one", table=table)
    except Exception as exc:
        return _server_failure(exc, action="select_one", table=table)

    return _respond(schemas.RowResponse(data=row))
