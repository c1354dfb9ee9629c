"""
Wiring of the key-value store and identity provider for the web adapter.

Why:
    Routes and the auth middleware need one shared store and one identity
    provider. Both are built lazily from the environment on first use so that
    importing the app never opens connections, and tests can inject fakes via
    `set_store` / `set_provider` before the first request.

Behavior:
    - KV_BACKEND=postgres -> PostgresKeyValueStore (DSN from KV_DATABASE_URL or
      DATABASE_URL); anything else -> a process-wide InMemoryKeyValueStore.
    - The provider is the Keycloak adapter configured from KC_* variables.
"""
from __future__ import annotations

import logging
from typing import Optional

from identity_access.accounts import AccountsService
from identity_access.oidc import load_oidc_config
from identity_access.provider import IdentityProvider, KeycloakIdentityProvider
from identity_access.resolver import IdentityResolver
from storage.config import get_kv_backend
from storage.memory import InMemoryKeyValueStore
from storage.ports import KeyValueStore
from teaching.services.assignments import AssignmentsService
from teaching.services.courses import CoursesService
from teaching.services.submissions import SubmissionsService

logger = logging.getLogger("portal.web.wiring")

_STORE: Optional[KeyValueStore] = None
_PROVIDER: Optional[IdentityProvider] = None


def build_store_from_env() -> KeyValueStore:
    backend = get_kv_backend()
    if backend == "postgres":
        from storage.kv_postgres import PostgresKeyValueStore

        store = PostgresKeyValueStore()
    else:
        store = InMemoryKeyValueStore()
    logger.info("Key-value store wired: %s", backend)
    return store


def set_store(store: Optional[KeyValueStore]) -> None:
    """Override the store (tests) or reset with None to rebuild from env."""
    global _STORE
    _STORE = store


def set_provider(provider: Optional[IdentityProvider]) -> None:
    """Override the identity provider (tests) or reset with None."""
    global _PROVIDER
    _PROVIDER = provider


def get_store() -> KeyValueStore:
    global _STORE
    if _STORE is None:
        _STORE = build_store_from_env()
    return _STORE


def get_provider() -> IdentityProvider:
    global _PROVIDER
    if _PROVIDER is None:
        _PROVIDER = KeycloakIdentityProvider(load_oidc_config())
    return _PROVIDER


def identity_resolver() -> IdentityResolver:
    return IdentityResolver(get_store(), get_provider())


def accounts_service() -> AccountsService:
    return AccountsService(get_store(), get_provider())


def courses_service() -> CoursesService:
    return CoursesService(get_store())


def assignments_service() -> AssignmentsService:
    return AssignmentsService(get_store())


def submissions_service() -> SubmissionsService:
    return SubmissionsService(get_store())


__all__ = [
    "build_store_from_env",
    "set_store",
    "set_provider",
    "get_store",
    "get_provider",
    "identity_resolver",
    "accounts_service",
    "courses_service",
    "assignments_service",
    "submissions_service",
]
