"""
Configuration and startup security checks for the assignment portal.

Why: A portal holding student work must not be deployed with development
shortcuts. This module provides a single guard that enforces minimal
production safety constraints without burdening local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
from typing import List

from storage.config import get_kv_backend


def current_env() -> str:
    return (os.getenv("PORTAL_ENV", "dev") or "dev").strip().lower()


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def is_prod_like() -> bool:
    return _is_prod_like(current_env())


def get_cors_origins() -> List[str]:
    """Allowed browser origins from CORS_ORIGINS (comma separated, default `*`)."""
    raw = (os.getenv("CORS_ORIGINS") or "*").strip()
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously insecure settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - The key-value backend must be persistent (not `memory`).
    - DATABASE_URL / KV_DATABASE_URL must not explicitly disable TLS.
    - The Keycloak admin client secret must be set and not a placeholder.
    - Keycloak endpoints must use https.
    """
    if not is_prod_like():
        return  # dev/test remain permissive

    # 1) In-memory store loses every record on restart
    if get_kv_backend() == "memory":
        raise SystemExit(
            "Refusing to start: KV_BACKEND=memory is not allowed in production/staging. Use KV_BACKEND=postgres."
        )

    # 2) Postgres TLS: basic guard to avoid explicit disable
    for key in ("DATABASE_URL", "KV_DATABASE_URL"):
        dsn = os.getenv(key, "")
        if "sslmode=disable" in dsn:
            raise SystemExit(
                f"Refusing to start: {key} contains sslmode=disable in production. Use sslmode=require or verify TLS."
            )

    # 3) Keycloak admin client secret must be configured (no password grant in prod)
    kc_secret = (os.getenv("KC_ADMIN_CLIENT_SECRET", "") or "").strip()
    if not kc_secret or kc_secret.upper().startswith("CHANGE_ME"):
        raise SystemExit(
            "Refusing to start: KC_ADMIN_CLIENT_SECRET is unset or a placeholder in production."
        )

    # 4) Keycloak endpoints must use HTTPS in production-like environments
    base_url = (os.getenv("KC_BASE_URL", "") or "").strip().lower()
    if base_url.startswith("http://"):
        raise SystemExit("Refusing to start: KC_BASE_URL must use https in production (got http).")


__all__ = ["current_env", "is_prod_like", "get_cors_origins", "ensure_secure_config_on_startup"]
