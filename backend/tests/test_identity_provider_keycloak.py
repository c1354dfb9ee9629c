"""
Keycloak identity provider adapter: error mapping onto the core taxonomy.
"""
from __future__ import annotations

import pytest
import requests

from core.errors import Conflict, Unauthenticated, UpstreamFailure
from identity_access import provider as provider_mod
from identity_access.admin_client import UserExistsError
from identity_access.oidc import OIDCConfig
from identity_access.provider import KeycloakIdentityProvider
from identity_access.tokens import AccessTokenVerificationError


pytestmark = pytest.mark.anyio("asyncio")

CFG = OIDCConfig(base_url="https://kc.example", realm="portal", client_id="portal-api")


class FakeAdmin:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict] = []

    def create_user(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


class FakeAuth:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict] = []

    def direct_grant(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


async def test_create_account_uses_synthetic_email():
    admin = FakeAdmin(result="kc-1")
    p = KeycloakIdentityProvider(CFG, admin=admin, auth=FakeAuth())
    assert await p.create_account(username="sam", password="pw", role="student") == "kc-1"
    assert admin.calls[0]["email"] == "sam@assignment-portal.local"
    assert admin.calls[0]["role"] == "student"


@pytest.mark.parametrize(
    "error, expected",
    [
        (UserExistsError("sam"), Conflict),
        (requests.ConnectionError("down"), UpstreamFailure),
        (ValueError("user_create_failed"), UpstreamFailure),
        (RuntimeError("admin token missing"), UpstreamFailure),
    ],
)
async def test_create_account_error_mapping(error, expected):
    p = KeycloakIdentityProvider(CFG, admin=FakeAdmin(error=error), auth=FakeAuth())
    with pytest.raises(expected):
        await p.create_account(username="sam", password="pw", role="student")


async def test_sign_in_returns_access_token():
    auth = FakeAuth(result={"access_token": "at-1"})
    p = KeycloakIdentityProvider(CFG, admin=FakeAdmin(), auth=auth)
    assert await p.sign_in(username="sam", password="pw") == "at-1"
    assert auth.calls[0] == {"email": "sam@assignment-portal.local", "password": "pw"}


async def test_sign_in_bad_credentials_and_outage():
    bad = KeycloakIdentityProvider(CFG, admin=FakeAdmin(), auth=FakeAuth(error=PermissionError("invalid_credentials")))
    with pytest.raises(Unauthenticated):
        await bad.sign_in(username="sam", password="nope")

    down = KeycloakIdentityProvider(CFG, admin=FakeAdmin(), auth=FakeAuth(error=requests.Timeout("slow")))
    with pytest.raises(UpstreamFailure):
        await down.sign_in(username="sam", password="pw")


async def test_verify_returns_sub_and_maps_failures(monkeypatch: pytest.MonkeyPatch):
    p = KeycloakIdentityProvider(CFG, admin=FakeAdmin(), auth=FakeAuth())

    monkeypatch.setattr(provider_mod, "verify_access_token", lambda **kw: {"sub": "kc-1"})
    assert await p.verify("token") == "kc-1"

    def _reject(**kw):
        raise AccessTokenVerificationError("token_expired")

    monkeypatch.setattr(provider_mod, "verify_access_token", _reject)
    with pytest.raises(Unauthenticated):
        await p.verify("token")
