"""
Identity provider port and its Keycloak adapter.

Why:
    The core never authenticates credentials itself. It asks an external
    identity provider to create accounts, sign users in, and turn a bearer
    credential into a stable subject id. Services depend on the Protocol so
    tests can inject a fake provider without network access.

Error mapping (adapter -> core):
    - bad credentials / invalid token          -> Unauthenticated
    - account already exists at the provider   -> Conflict
    - any transport or provider-side failure   -> UpstreamFailure
"""
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import requests

from core.errors import Conflict, Unauthenticated, UpstreamFailure

from .admin_client import AdminClient, UserExistsError
from .domain import account_email
from .keycloak_client import AuthClient
from .oidc import OIDCConfig
from .tokens import JWKS_CACHE, AccessTokenVerificationError, JWKSCache, verify_access_token

logger = logging.getLogger("portal.identity_access.provider")


class IdentityProvider(Protocol):
    async def create_account(self, *, username: str, password: str, role: str) -> str:
        """Create an account and return the provider's subject id."""
        ...

    async def sign_in(self, *, username: str, password: str) -> str:
        """Return an access token for valid credentials."""
        ...

    async def verify(self, credential: str) -> str:
        """Return the subject id carried by a valid bearer credential."""
        ...


class KeycloakIdentityProvider:
    """IdentityProvider backed by a Keycloak realm.

    The underlying clients are blocking (requests); calls run in a worker
    thread so the event loop keeps serving other requests.
    """

    def __init__(
        self,
        cfg: OIDCConfig,
        *,
        admin: AdminClient | None = None,
        auth: AuthClient | None = None,
        jwks_cache: JWKSCache | None = None,
    ) -> None:
        self.cfg = cfg
        self._admin = admin or AdminClient(cfg)
        self._auth = auth or AuthClient(cfg)
        self._jwks_cache = jwks_cache or JWKS_CACHE

    async def create_account(self, *, username: str, password: str, role: str) -> str:
        try:
            return await asyncio.to_thread(
                self._admin.create_user,
                email=account_email(username),
                password=password,
                username=username,
                role=role,
            )
        except UserExistsError as exc:
            raise Conflict("Username already exists") from exc
        except (requests.RequestException, ValueError, RuntimeError) as exc:
            logger.warning("Identity provider signup failed: %s", exc.__class__.__name__)
            raise UpstreamFailure("Failed to create user") from exc

    async def sign_in(self, *, username: str, password: str) -> str:
        try:
            tokens = await asyncio.to_thread(
                self._auth.direct_grant, email=account_email(username), password=password
            )
        except PermissionError as exc:
            raise Unauthenticated("Invalid credentials") from exc
        except (requests.RequestException, ValueError, RuntimeError) as exc:
            logger.warning("Identity provider signin failed: %s", exc.__class__.__name__)
            raise UpstreamFailure("Sign-in unavailable") from exc
        return str(tokens["access_token"])

    async def verify(self, credential: str) -> str:
        try:
            claims = await asyncio.to_thread(
                verify_access_token, access_token=credential, cfg=self.cfg, cache=self._jwks_cache
            )
        except AccessTokenVerificationError as exc:
            logger.warning("Access token verification failed: %s", exc.code)
            raise Unauthenticated() from exc
        return str(claims["sub"])


__all__ = ["IdentityProvider", "KeycloakIdentityProvider"]
