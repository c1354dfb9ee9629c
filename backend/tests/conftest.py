"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend, and give every test a fresh in-memory
key-value store plus a fake identity provider so no test needs Keycloak or
Postgres.
"""
import sys
from pathlib import Path

import pytest

# Ensure modules in backend/ and the test helpers are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = REPO_ROOT / "backend"
TESTS_DIR = BACKEND_DIR / "tests"
for p in (str(BACKEND_DIR), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

from fakes import FakeIdentityProvider  # noqa: E402
from storage.memory import InMemoryKeyValueStore  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_portal_env(monkeypatch: pytest.MonkeyPatch):
    """Clear env-driven toggles so a developer shell cannot leak into tests.

    Individual tests opt into prod semantics or a Postgres backend explicitly.
    """
    for var in (
        "PORTAL_ENV",
        "KV_BACKEND",
        "KV_TABLE",
        "KV_DATABASE_URL",
        "DATABASE_URL",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture(autouse=True)
def _wire_web_fakes(store: InMemoryKeyValueStore, provider: FakeIdentityProvider):
    """Point the web wiring at this test's store and provider, then reset it."""
    from web import wiring

    wiring.set_store(store)
    wiring.set_provider(provider)
    yield
    wiring.set_store(None)
    wiring.set_provider(None)
