"""
Supabase (PostgREST) store over HTTP.

Used endpoints, relative to {SUPABASE_URL}/rest/v1:
- POST /{table}                       -> inserted rows (Prefer: return=representation)
- GET  /{table}?select=*&order=...    -> list of rows
- GET  /{table}?select=*&col=eq.value -> single row (object Accept header)
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from .store import Row, StoreError

_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


def _table_path(table: str) -> str:
    table = (table or "").strip()
    if not table:
        raise StoreError("Table name is empty.")
    return "/" + quote(table, safe="")


def _error_from_response(resp: httpx.Response) -> StoreError:
    try:
        body: Any = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("message"):
        return StoreError(
            str(body["message"]),
            code=body.get("code"),
            details=body.get("details"),
            hint=body.get("hint"),
            status_code=resp.status_code,
        )

    # Avoid dumping huge bodies; include a small snippet.
    text = resp.text[:500] or resp.reason_phrase
    return StoreError(text, code=str(resp.status_code), status_code=resp.status_code)


class SupabaseStore:
    """
    Holds one shared `httpx.AsyncClient` for the process lifetime.
    """

    def __init__(
        self,
        *,
        url: str,
        anon_key: str,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = (url or "").strip().rstrip("/")
        if not base_url:
            raise RuntimeError("Supabase URL is empty.")
        self._client = httpx.AsyncClient(
            base_url=f"{base_url}/rest/v1",
            headers={
                "apikey": anon_key,
                "Authorization": f"Bearer {anon_key}",
            },
            timeout=timeout_s,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        resp = await self._client.request(
            method,
            _table_path(table),
            params=params,
            json=json,
            headers=headers,
        )
        if resp.status_code >= 400:
            raise _error_from_response(resp)
        if not resp.content:
            return None
        return resp.json()

    async def insert(self, table: str, rows: Any) -> list[Row]:
        data = await self._send(
            "POST",
            table,
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            raise ValueError("Supabase returned an unexpected insert payload.")
        return data

    async def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"

        data = await self._send("GET", table, params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError("Supabase returned an unexpected select payload.")
        return data

    async def select_one(self, table: str, *, column: str, value: Any) -> Row:
        # PostgREST answers 406 / PGRST116 unless exactly one row matches.
        data = await self._send(
            "GET",
            table,
            params={"select": "*", column: f"eq.{value}"},
            headers={"Accept": _OBJECT_MEDIA_TYPE},
        )
        if not isinstance(data, dict):
            raise ValueError("Supabase returned an unexpected single-row payload.")
        return data
