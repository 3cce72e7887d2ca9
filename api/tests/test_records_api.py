from __future__ import annotations

import httpx
import pytest

from core.store import StoreError

MISSING = {"error": "Missing required fields: table and data"}


def test_health_reports_running(client, store):
    store.fail_with = RuntimeError("backend down")

    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Supabase Express API is running", "status": "healthy"}
    assert store.calls == []


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"table": "calllogs"},
        {"data": {"caller": "x"}},
        {"table": "", "data": {"caller": "x"}},
        {"table": "calllogs", "data": None},
        {"table": "calllogs", "data": {}},
        {"data": "x"},
        {"table": "calllogs", "data": ""},
        {"table": 0, "data": {"a": 1}},
        {"table": "   ", "data": {"a": 1}},
        [{"table": "calllogs", "data": {"a": 1}}],
        "hello",
        42,
    ],
)
def test_insert_rejects_missing_fields(client, store, body):
    resp = client.post("/api/insert", json=body)

    assert resp.status_code == 400
    assert resp.json() == MISSING
    assert store.calls == []


def test_insert_rejects_empty_body(client, store):
    resp = client.post("/api/insert")

    assert resp.status_code == 400
    assert resp.json() == MISSING


@pytest.mark.parametrize(
    ("body", "code"),
    [
        ({"table": "calllogs", "data": "x"}, "PGRST102"),
        ({"table": "calllogs", "data": [1, 2]}, "PGRST102"),
        ({"table": 5, "data": {"a": 1}}, "42P01"),
    ],
)
def test_insert_forwards_mistyped_fields_to_store(client, store, body, code):
    resp = client.post("/api/insert", json=body)

    assert resp.status_code == 400
    assert resp.json()["details"]["code"] == code
    assert store.calls == [("insert", str(body["table"]))]


def test_insert_returns_inserted_rows(client, store):
    resp = client.post("/api/insert", json={"table": "calllogs", "data": {"caller": "x"}})

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Data inserted successfully"
    assert body["data"] == store.tables["calllogs"]
    assert body["data"][0]["caller"] == "x"


def test_insert_accepts_row_list(client, store):
    resp = client.post(
        "/api/insert",
        json={"table": "users", "data": [{"name": "a"}, {"name": "b"}]},
    )

    assert resp.status_code == 201
    assert [row["name"] for row in resp.json()["data"]] == ["a", "b"]


def test_insert_relays_backend_error(client):
    resp = client.post("/api/insert", json={"table": "missing", "data": {"a": 1}})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == 'relation "public.missing" does not exist'
    assert body["details"]["code"] == "42P01"
    assert body["details"]["message"] == body["error"]
    assert "success" not in body


def test_insert_reports_unexpected_errors(client, store):
    store.fail_with = httpx.ConnectError("connection refused")

    resp = client.post("/api/insert", json={"table": "calllogs", "data": {"a": 1}})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "connection refused"}


def test_list_table_returns_rows(client, store):
    client.post("/api/insert", json={"table": "users", "data": {"name": "a"}})

    resp = client.get("/api/data/users")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": store.tables["users"]}


def test_list_unknown_table_is_backend_error(client):
    resp = client.get("/api/data/nope")

    assert resp.status_code == 400
    assert resp.json()["error"] == 'relation "public.nope" does not exist'


def test_list_table_store_error_details_are_verbatim(client, store):
    store.fail_with = StoreError("permission denied for table users", code="42501", hint="grant select")

    resp = client.get("/api/data/users")

    assert resp.status_code == 400
    assert resp.json()["details"] == {
        "message": "permission denied for table users",
        "code": "42501",
        "details": None,
        "hint": "grant select",
    }


def test_allow_list_blocks_other_tables(client, store, monkeypatch):
    monkeypatch.setenv("ALLOWED_TABLES", "calllogs")

    insert = client.post("/api/insert", json={"table": "users", "data": {"name": "a"}})
    listing = client.get("/api/data/users")
    allowed = client.get("/api/data/calllogs")

    assert insert.status_code == 403
    assert insert.json() == {"error": "Table is not allowed: users"}
    assert listing.status_code == 403
    assert allowed.status_code == 200
    assert store.calls == [("select", "calllogs")]
