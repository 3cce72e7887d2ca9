from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core.store import Row, StoreError
from main import create_app

_BASE_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeStore:
    """
    In-memory stand-in for the backend store. Rows get an `id` and a
    `created_at` one second apart so ordering is deterministic.
    """

    def __init__(self, tables: tuple[str, ...] = ("calllogs", "users")) -> None:
        self.tables: dict[str, list[Row]] = {name: [] for name in tables}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None
        self.closed = False
        self._ids = count(1)

    def _check(self, action: str, table: str) -> list[Row]:
        self.calls.append((action, table))
        if self.fail_with is not None:
            raise self.fail_with
        if table not in self.tables:
            raise StoreError(
                f'relation "public.{table}" does not exist',
                code="42P01",
                status_code=404,
            )
        return self.tables[table]

    async def insert(self, table: str, rows: Any) -> list[Row]:
        target = self._check("insert", table)
        batch = [rows] if isinstance(rows, dict) else rows
        if not isinstance(batch, list) or not all(isinstance(row, dict) for row in batch):
            raise StoreError("Empty or invalid json", code="PGRST102", status_code=400)
        inserted = []
        for row in batch:
            row_id = next(self._ids)
            stored = {
                "id": row_id,
                "created_at": (_BASE_TS + timedelta(seconds=row_id)).isoformat(),
                **row,
            }
            target.append(stored)
            inserted.append(dict(stored))
        return inserted

    async def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        rows = [dict(r) for r in self._check("select", table)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by), reverse=descending)
        return rows

    async def select_one(self, table: str, *, column: str, value: Any) -> Row:
        matches = [dict(r) for r in self._check("select_one", table) if str(r.get(column)) == str(value)]
        if len(matches) != 1:
            raise StoreError(
                "JSON object requested, multiple (or no) rows returned",
                code="PGRST116",
                details=f"The result contains {len(matches)} rows",
                status_code=406,
            )
        return matches[0]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def client(store: FakeStore):
    with TestClient(create_app(store=store)) as test_client:
        yield test_client
