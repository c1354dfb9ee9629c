"""
Web wiring: lazy construction of the store and identity provider from env.
"""
from __future__ import annotations

import pytest

from identity_access.provider import KeycloakIdentityProvider
from storage.kv_postgres import PostgresKeyValueStore
from storage.memory import InMemoryKeyValueStore
from web import wiring


def test_injected_fakes_are_used(store, provider):
    assert wiring.get_store() is store
    assert wiring.get_provider() is provider
    assert wiring.courses_service()._store is store


def test_memory_store_is_built_once_and_shared():
    wiring.set_store(None)
    first = wiring.get_store()
    assert isinstance(first, InMemoryKeyValueStore)
    assert wiring.get_store() is first


def test_postgres_backend_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KV_BACKEND", "postgres")
    monkeypatch.setenv("KV_DATABASE_URL", "postgresql://kv@db/portal")
    assert isinstance(wiring.build_store_from_env(), PostgresKeyValueStore)


def test_keycloak_provider_built_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KC_BASE_URL", "https://id.example.com/")
    monkeypatch.setenv("KC_REALM", "school")
    wiring.set_provider(None)
    built = wiring.get_provider()
    assert isinstance(built, KeycloakIdentityProvider)
    assert built.cfg.issuer == "https://id.example.com/realms/school"
