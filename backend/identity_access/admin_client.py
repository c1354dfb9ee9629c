"""
Keycloak Admin client (minimal) for account provisioning at signup.

Design:
- Framework-agnostic, callable from the account service.
- Uses requests under the hood; callers are responsible for exception handling.

Security:
- Do not log credentials or tokens.
- Prefer a confidential client (client_credentials). The password grant with
  an admin user is a development fallback and refused in production-like envs.
"""

from __future__ import annotations

from typing import Dict
import os
import requests

from .oidc import OIDCConfig


class UserExistsError(Exception):
    """Raised when the identity provider already holds an account for the email."""


class AdminClient:
    def __init__(self, cfg: OIDCConfig) -> None:
        self.cfg = cfg
        self._admin_realm = os.getenv("KC_ADMIN_REALM", "master")
        self._admin_client_id = os.getenv("KC_ADMIN_CLIENT_ID", "portal-admin-cli")
        self._admin_client_secret = os.getenv("KC_ADMIN_CLIENT_SECRET")
        self._admin_username = os.getenv("KC_ADMIN_USERNAME")
        self._admin_password = os.getenv("KC_ADMIN_PASSWORD")

    def _token(self) -> str:
        url = f"{self.cfg.base_url}/realms/{self._admin_realm}/protocol/openid-connect/token"
        if self._admin_client_secret:
            data = {
                "grant_type": "client_credentials",
                "client_id": self._admin_client_id,
                "client_secret": self._admin_client_secret,
            }
        else:
            env = (os.getenv("PORTAL_ENV", "dev") or "").lower()
            if env in {"prod", "production", "stage", "staging"}:
                raise RuntimeError("password_grant_disabled_in_prod")
            if not self._admin_username or not self._admin_password:
                raise RuntimeError(
                    "Keycloak admin credentials missing: set KC_ADMIN_CLIENT_SECRET or KC_ADMIN_USERNAME/PASSWORD"
                )
            data = {
                "grant_type": "password",
                "client_id": self._admin_client_id,
                "username": self._admin_username,
                "password": self._admin_password,
            }
        r = requests.post(url, data=data, timeout=10)
        r.raise_for_status()
        tok = (r.json() or {}).get("access_token")
        if not tok:
            raise RuntimeError("Keycloak admin token missing")
        return str(tok)

    def _admin(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    def create_user(self, *, email: str, password: str, username: str, role: str) -> str:
        """Create an enabled, confirmed account and return its subject id.

        The portal has no mail server, so the email is marked verified right
        away. Username and role travel as user attributes for auditing; the
        portal's own user record stays authoritative for the role.
        """
        token = self._token()
        url = f"{self.cfg.admin_base}/users"
        payload = {
            "username": email,
            "email": email,
            "enabled": True,
            "emailVerified": True,
            "attributes": {"portal_username": [username], "portal_role": [role]},
            "credentials": [{"type": "password", "value": password, "temporary": False}],
        }
        r = requests.post(url, headers=self._admin(token), json=payload, timeout=10)
        if r.status_code == 409:
            raise UserExistsError(email)
        if r.status_code not in (201, 204):
            raise ValueError("user_create_failed")
        # Get created user id by querying by exact email (simplest approach)
        q = requests.get(
            url, headers=self._admin(token), params={"email": email, "exact": True}, timeout=10
        )
        q.raise_for_status()
        arr = q.json() or []
        if not arr:
            raise ValueError("user_lookup_failed")
        user_id = arr[0].get("id")
        if not user_id:
            raise ValueError("user_id_missing")
        return str(user_id)
