"""
Response envelopes shared by every record endpoint.

Request bodies are deliberately not modelled: they are forwarded as posted,
and only the generic insert checks that `table` and `data` are present.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class InsertResponse(BaseModel):
    success: bool = True
    message: str
    data: list[dict[str, Any]]


class RowsResponse(BaseModel):
    success: bool = True
    data: list[dict[str, Any]]


class CountedRowsResponse(BaseModel):
    success: bool = True
    count: int
    data: list[dict[str, Any]]


class RowResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class ClientErrorResponse(BaseModel):
    error: str


class StoreErrorResponse(BaseModel):
    error: str
    details: dict[str, Any]


class ServerErrorResponse(BaseModel):
    error: str = "Internal server error"
    message: str
