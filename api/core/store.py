"""
Backend store contract shared by the route handlers.

A store is built once per process (see the lifespan in `api/main.py`) and
handed to handlers through the `get_store` dependency. Two implementations
exist:
- `core.supabase.SupabaseStore`: PostgREST over HTTP (default)
- `core.db.PostgresStore`: direct Postgres over asyncpg

Failures reported by the backend raise `StoreError`. Anything else (network
errors, malformed responses) propagates unchanged.

Insert payloads are forwarded as posted. A payload that is not an object or a
list of objects is the backend's to reject, with a `StoreError`.
"""

from __future__ import annotations

from typing import Any, Protocol

from fastapi import Request

from . import settings

Row = dict[str, Any]


class StoreError(RuntimeError):
    """
    A failure the backend reported for an otherwise completed call
    (unknown table, constraint violation, single-row mismatch, ...).
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: Any = None,
        hint: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "hint": self.hint,
        }


class DataStore(Protocol):
    async def insert(self, table: str, rows: Any) -> list[Row]: ...

    async def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]: ...

    async def select_one(self, table: str, *, column: str, value: Any) -> Row: ...

    async def close(self) -> None: ...


async def open_store() -> DataStore:
    """
    Build the store selected by DB_PROVIDER.
    """
    provider = settings.db_provider()
    if provider == "supabase":
        from .supabase import SupabaseStore

        return SupabaseStore(
            url=settings.supabase_url(),
            anon_key=settings.supabase_anon_key(),
            timeout_s=settings.supabase_timeout_s(),
        )
    if provider == "postgres":
        from .db import PostgresStore

        return await PostgresStore.connect(settings.database_url())
    raise RuntimeError(f"Unknown DB_PROVIDER: {provider!r}")


class StoreUnavailableError(RuntimeError):
    """
    The store could not be opened on first use (missing configuration,
    unreachable database).
    """


async def get_store(request: Request) -> DataStore:
    """
    Return the process store. Hosts that skip the ASGI lifespan get it
    opened here on first use instead.
    """
    state = request.app.state
    store = getattr(state, "store", None)
    if store is not None:
        return store

    async with state.store_lock:
        if state.store is None:
            try:
                state.store = await open_store()
            except Exception as exc:
                raise StoreUnavailableError(str(exc)) from exc
    return state.store
