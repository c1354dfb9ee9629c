"""
Centralized configuration for the key-value store backend.

Intent:
    Provide a single source of truth for which store backs the portal and
    where it lives, so the web wiring, startup guard and tests read the same
    environment variables.

Behavior:
    - get_kv_backend(): "memory" (default) or "postgres" via KV_BACKEND.
    - get_kv_table(): table name via KV_TABLE (default "kv_store").
    - get_kv_dsn(): KV_DATABASE_URL, then DATABASE_URL.

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

import os

KV_BACKEND_DEFAULT = "memory"
KV_TABLE_DEFAULT = "kv_store"
KV_BACKENDS = frozenset({"memory", "postgres"})


def get_kv_backend() -> str:
    """Return the configured backend name, falling back to memory on unknown values."""
    raw = (os.getenv("KV_BACKEND") or KV_BACKEND_DEFAULT).strip().lower()
    return raw if raw in KV_BACKENDS else KV_BACKEND_DEFAULT


def get_kv_table() -> str:
    return (os.getenv("KV_TABLE") or KV_TABLE_DEFAULT).strip()


def get_kv_dsn() -> str:
    """Return the Postgres DSN for the key-value table.

    Order of precedence (first non-empty wins):
      1) KV_DATABASE_URL (store-specific override)
      2) DATABASE_URL (app-wide default)
    """
    for candidate in (os.getenv("KV_DATABASE_URL"), os.getenv("DATABASE_URL")):
        if candidate and candidate.strip():
            return candidate.strip()
    raise RuntimeError("Database DSN unavailable for key-value store")


__all__ = [
    "KV_BACKEND_DEFAULT",
    "KV_TABLE_DEFAULT",
    "KV_BACKENDS",
    "get_kv_backend",
    "get_kv_table",
    "get_kv_dsn",
]
