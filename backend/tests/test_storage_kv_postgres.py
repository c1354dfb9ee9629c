"""
Postgres key-value adapter against a fake psycopg connection.

The adapter must pass keys as bound parameters, wrap values as Jsonb, escape
LIKE wildcards in prefixes and surface driver errors as UpstreamFailure.
"""
from __future__ import annotations

import types

import psycopg
import pytest

from core.errors import UpstreamFailure
from storage import kv_postgres
from storage.kv_postgres import PostgresKeyValueStore


pytestmark = pytest.mark.anyio("asyncio")


class _FakeCursor:
    def __init__(self, conn: "_FakeConn") -> None:
        self._conn = conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, stmt, params):
        self._conn.executed.append(params)
        if self._conn.error is not None:
            raise self._conn.error

    async def fetchall(self):
        return list(self._conn.rows)


class _FakeConn:
    def __init__(self) -> None:
        self.executed: list[tuple] = []
        self.rows: list[tuple] = []
        self.error: Exception | None = None
        self.connect_kwargs: list[dict] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def cursor(self):
        return _FakeCursor(self)


@pytest.fixture
def fake_conn(monkeypatch: pytest.MonkeyPatch) -> _FakeConn:
    conn = _FakeConn()

    async def _connect(dsn, **kwargs):
        conn.connect_kwargs.append({"dsn": dsn, **kwargs})
        return conn

    fake_psycopg = types.SimpleNamespace(
        AsyncConnection=types.SimpleNamespace(connect=_connect),
        Error=psycopg.Error,
    )
    monkeypatch.setattr(kv_postgres, "psycopg", fake_psycopg)
    return conn


async def test_get_returns_first_value_or_none(fake_conn: _FakeConn):
    store = PostgresKeyValueStore(dsn="postgresql://kv@db/portal")
    fake_conn.rows = [({"id": "course:1-a"},)]
    assert await store.get("course:1-a") == {"id": "course:1-a"}
    assert fake_conn.executed[-1] == ("course:1-a",)

    fake_conn.rows = []
    assert await store.get("course:missing") is None


async def test_set_wraps_value_as_jsonb_and_autocommits(fake_conn: _FakeConn):
    store = PostgresKeyValueStore(dsn="postgresql://kv@db/portal")
    await store.set("teacher_courses:tom", ["course:1-a"])
    key, value = fake_conn.executed[-1]
    assert key == "teacher_courses:tom"
    assert value.obj == ["course:1-a"]
    assert fake_conn.connect_kwargs[-1].get("autocommit") is True


async def test_get_by_prefix_escapes_like_wildcards(fake_conn: _FakeConn):
    store = PostgresKeyValueStore(dsn="postgresql://kv@db/portal")
    fake_conn.rows = [({"n": 1},), ({"n": 2},)]
    values = await store.get_by_prefix("submission:assignment:1_a%:")
    assert values == [{"n": 1}, {"n": 2}]
    assert fake_conn.executed[-1] == ("submission:assignment:1\\_a\\%:%",)


async def test_driver_errors_become_upstream_failure(fake_conn: _FakeConn):
    store = PostgresKeyValueStore(dsn="postgresql://kv@db/portal")
    fake_conn.error = psycopg.OperationalError("down")
    with pytest.raises(UpstreamFailure):
        await store.get("user:alice")
    with pytest.raises(UpstreamFailure):
        await store.delete("course:1-a")


def test_table_name_must_be_an_identifier():
    with pytest.raises(ValueError):
        PostgresKeyValueStore(dsn="postgresql://kv@db/portal", table="kv; drop table users")
    PostgresKeyValueStore(dsn="postgresql://kv@db/portal", table="public.kv_store")


def test_dsn_falls_back_to_database_url(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://app@db/portal")
    store = PostgresKeyValueStore()
    assert store._dsn == "postgresql://app@db/portal"
    monkeypatch.setenv("KV_DATABASE_URL", "postgresql://kv@db/kv")
    assert PostgresKeyValueStore()._dsn == "postgresql://kv@db/kv"


def test_missing_dsn_raises_runtime_error():
    with pytest.raises(RuntimeError):
        PostgresKeyValueStore()
