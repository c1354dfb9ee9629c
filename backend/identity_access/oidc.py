"""
OIDC realm configuration for the Keycloak identity provider.

Why: Keep endpoint derivation in one framework-independent place. The token
verifier, the direct-grant client and the admin client all build their URLs
from this config instead of concatenating strings on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class OIDCConfig:
    base_url: str  # internal base URL (server-to-server), e.g., http://keycloak:8080
    realm: str  # e.g., portal
    client_id: str  # e.g., portal-api

    @property
    def issuer(self) -> str:
        return f"{self.base_url}/realms/{self.realm}"

    @property
    def token_endpoint(self) -> str:
        return f"{self.issuer}/protocol/openid-connect/token"

    @property
    def certs_endpoint(self) -> str:
        return f"{self.issuer}/protocol/openid-connect/certs"

    @property
    def admin_base(self) -> str:
        return f"{self.base_url}/admin/realms/{self.realm}"


def load_oidc_config() -> OIDCConfig:
    base_url = (os.getenv("KC_BASE_URL", "http://localhost:8080") or "").rstrip("/")
    realm = os.getenv("KC_REALM", "portal")
    client_id = os.getenv("KC_CLIENT_ID", "portal-api")
    return OIDCConfig(base_url=base_url, realm=realm, client_id=client_id)


__all__ = ["OIDCConfig", "load_oidc_config"]
