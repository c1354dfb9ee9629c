"""
Minimal Keycloak client for the password (Direct Grant) sign-in flow.

This module is a thin, framework-agnostic adapter used by the account service
to exchange a username/password for an access token. The portal's clients
are API consumers holding a bearer token, so the direct grant is the primary
sign-in path rather than a browser redirect.

Security: Never log credentials. This client does not store or persist any
sensitive data; it simply forwards to Keycloak's token endpoint.
"""

from __future__ import annotations

from typing import Dict
import requests

from .oidc import OIDCConfig


class AuthClient:
    """Authenticate against Keycloak using the Direct Grant.

    The method `direct_grant` performs a password grant against the configured
    realm and client. It returns a token dict on success and raises on errors.
    """

    def __init__(self, cfg: OIDCConfig) -> None:
        self.cfg = cfg

    def direct_grant(self, *, email: str, password: str) -> Dict[str, str]:
        data = {
            "grant_type": "password",
            "client_id": self.cfg.client_id,
            "username": email,
            "password": password,
        }
        r = requests.post(self.cfg.token_endpoint, data=data, timeout=10)
        if r.status_code in (400, 401):
            # Keycloak answers invalid_grant with 401 (older releases: 400).
            raise PermissionError("invalid_credentials")
        if r.status_code != 200:
            raise RuntimeError("direct_grant_failed")
        body = r.json()
        if not isinstance(body, dict) or "access_token" not in body:
            raise RuntimeError("access_token_missing")
        return body  # type: ignore[return-value]
