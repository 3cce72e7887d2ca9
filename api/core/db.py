"""
Direct Postgres store (raw SQL) using asyncpg.

Selected with DB_PROVIDER=postgres. Talks to the Supabase database itself
instead of its REST layer, with the same result and error shapes as
`core.supabase.SupabaseStore`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
- identifiers (table/column names) cannot be parameters, so they are quoted
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .store import Row, StoreError

SINGLE_ROW_CODE = "PGRST116"
SINGLE_ROW_MESSAGE = "JSON object requested, multiple (or no) rows returned"
INVALID_BODY_CODE = "PGRST102"


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def quote_ident(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise StoreError("Identifier is empty.")
    return '"' + name.replace('"', '""') + '"'


def _column_union(rows: list[Row]) -> list[str]:
    # First-seen order, so the column list is stable for a given payload.
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def _as_batch(rows: Any) -> list[Row]:
    if isinstance(rows, dict):
        return [rows]
    if isinstance(rows, list) and all(isinstance(row, dict) for row in rows):
        return rows
    raise StoreError(
        "Empty or invalid json",
        code=INVALID_BODY_CODE,
        details="Expected a JSON object or an array of JSON objects",
    )


def build_insert_sql(table: str, columns: list[str]) -> str:
    target = quote_ident(table)
    if not columns:
        return f"INSERT INTO {target} DEFAULT VALUES RETURNING *"

    cols = ", ".join(quote_ident(c) for c in columns)
    return (
        f"INSERT INTO {target} ({cols}) "
        f"SELECT {cols} FROM json_populate_recordset(NULL::{target}, $1::json) "
        "RETURNING *"
    )


def build_select_sql(table: str, *, order_by: str | None = None, descending: bool = False) -> str:
    sql = f"SELECT * FROM {quote_ident(table)}"
    if order_by:
        sql += f" ORDER BY {quote_ident(order_by)} {'DESC' if descending else 'ASC'}"
    return sql


def build_select_one_sql(table: str, column: str) -> str:
    # LIMIT 2 is enough to tell "exactly one" from "more than one".
    return f"SELECT * FROM {quote_ident(table)} WHERE {quote_ident(column)}::text = $1 LIMIT 2"


def _store_error(exc: asyncpg.PostgresError) -> StoreError:
    return StoreError(
        str(getattr(exc, "message", None) or exc),
        code=getattr(exc, "sqlstate", None),
        details=getattr(exc, "detail", None),
        hint=getattr(exc, "hint", None),
    )


class PostgresStore:
    """
    Owns an asyncpg pool; created once on startup and closed on shutdown.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @classmethod
    async def connect(cls, dsn: str) -> "PostgresStore":
        pool = await asyncpg.create_pool(
            dsn=_sanitize_database_url(dsn),
            min_size=1,
            max_size=5,
            command_timeout=30,
        )
        return cls(pool)

    async def close(self) -> None:
        await self._pool.close()

    async def insert(self, table: str, rows: Any) -> list[Row]:
        batch = _as_batch(rows)
        if not batch:
            return []

        columns = _column_union(batch)
        sql = build_insert_sql(table, columns)
        try:
            if not columns:
                async with self._pool.acquire() as conn:
                    async with conn.transaction():
                        records = [await conn.fetchrow(sql) for _ in batch]
            else:
                records = await self._pool.fetch(sql, json.dumps(batch, default=str))
        except asyncpg.PostgresError as exc:
            raise _store_error(exc) from exc
        return [dict(r) for r in records]

    async def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        sql = build_select_sql(table, order_by=order_by, descending=descending)
        try:
            records = await self._pool.fetch(sql)
        except asyncpg.PostgresError as exc:
            raise _store_error(exc) from exc
        return [dict(r) for r in records]

    async def select_one(self, table: str, *, column: str, value: Any) -> Row:
        sql = build_select_one_sql(table, column)
        try:
            records = await self._pool.fetch(sql, str(value))
        except asyncpg.PostgresError as exc:
            raise _store_error(exc) from exc

        if len(records) != 1:
            raise StoreError(
                SINGLE_ROW_MESSAGE,
                code=SINGLE_ROW_CODE,
                details=f"The result contains {len(records)} rows",
            )
        return dict(records[0])
