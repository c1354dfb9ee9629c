"""
Postgres-backed key-value store (production).

Why: The hosted deployment keeps every portal record in one `key -> jsonb`
table, the same flat layout the original hosted key-value store used. This
adapter maps the KeyValueStore port onto that table with psycopg3's async API.

Schema:
    create table kv_store (key text primary key, value jsonb not null);

Notes:
    - One short-lived connection per call; no cross-call transaction exists,
      matching the port's "no multi-key atomicity" contract.
    - Driver errors surface as UpstreamFailure so routes can answer 502.
"""
from __future__ import annotations

import logging
import re
from typing import Any

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from core.errors import UpstreamFailure

from .config import get_kv_dsn, get_kv_table

logger = logging.getLogger("portal.storage.kv")

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresKeyValueStore:
    """Async key-value store over a single Postgres table.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Defaults to KV_DATABASE_URL/DATABASE_URL.
    table:
        Optionally schema-qualified table name. Defaults to KV_TABLE.
    """

    def __init__(self, dsn: str | None = None, table: str | None = None) -> None:
        self._dsn = dsn or get_kv_dsn()
        table = table or get_kv_table()
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._table = table

    def _ident(self) -> sql.Composable:
        if "." in self._table:
            schema, name = self._table.split(".", 1)
            return sql.Identifier(schema, name)
        return sql.Identifier(self._table)

    async def _fetch(self, stmt: sql.Composable, params: tuple) -> list[tuple]:
        try:
            async with await psycopg.AsyncConnection.connect(self._dsn) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(stmt, params)
                    return list(await cur.fetchall())
        except psycopg.Error as exc:
            logger.warning("KV read failed: %s", exc.__class__.__name__)
            raise UpstreamFailure("Key-value store unavailable") from exc

    async def _write(self, stmt: sql.Composable, params: tuple) -> None:
        try:
            async with await psycopg.AsyncConnection.connect(self._dsn, autocommit=True) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(stmt, params)
        except psycopg.Error as exc:
            logger.warning("KV write failed: %s", exc.__class__.__name__)
            raise UpstreamFailure("Key-value store unavailable") from exc

    async def get(self, key: str) -> Any | None:
        stmt = sql.SQL("select value from {} where key = %s").format(self._ident())
        rows = await self._fetch(stmt, (key,))
        return rows[0][0] if rows else None

    async def set(self, key: str, value: Any) -> None:
        stmt = sql.SQL(
            "insert into {} (key, value) values (%s, %s) "
            "on conflict (key) do update set value = excluded.value"
        ).format(self._ident())
        await self._write(stmt, (key, Jsonb(value)))

    async def delete(self, key: str) -> None:
        stmt = sql.SQL("delete from {} where key = %s").format(self._ident())
        await self._write(stmt, (key,))

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        stmt = sql.SQL("select value from {} where key like %s escape '\\' order by key").format(self._ident())
        rows = await self._fetch(stmt, (_escape_like(prefix) + "%",))
        return [row[0] for row in rows]


__all__ = ["PostgresKeyValueStore"]
