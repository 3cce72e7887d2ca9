"""
Environment configuration.

All values are read lazily from the process environment so tests can
monkeypatch them. `main.py` loads a local `.env` file before anything here
is called.
"""

from __future__ import annotations

import os


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def supabase_url() -> str:
    url = _env_str("SUPABASE_URL")
    if not url:
        raise RuntimeError("SUPABASE_URL is not set.")
    return url.rstrip("/")


def supabase_anon_key() -> str:
    key = _env_str("SUPABASE_ANON_KEY")
    if not key:
        raise RuntimeError("SUPABASE_ANON_KEY is not set.")
    return key


def supabase_timeout_s() -> float:
    return _env_float("SUPABASE_TIMEOUT_S", 30.0)


def db_provider() -> str:
    return _env_str("DB_PROVIDER", "supabase").lower()


def database_url() -> str:
    url = _env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return url


def host() -> str:
    return _env_str("HOST", "0.0.0.0")


def port() -> int:
    return _env_int("PORT", 3000)


def is_serverless() -> bool:
    # Vercel sets VERCEL=1 in build and runtime environments.
    return bool(_env_str("VERCEL"))


def allowed_tables() -> frozenset[str]:
    """
    Optional table allow-list for the dynamic routes. Empty means unrestricted.
    """
    raw = _env_str("ALLOWED_TABLES")
    return frozenset(name.strip() for name in raw.split(",") if name.strip())


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
