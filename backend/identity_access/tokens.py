"""
Bearer access token verification against the Keycloak realm keys.

Why: The identity resolver only needs a trustworthy subject id (`sub`). All
cryptographic checks live here, away from the web adapter, so they can be
unit tested with a fake key cache.

Security:
    - Signature: RS256 only, whatever `alg` the JWKS entry advertises.
    - Issuer: must equal the realm URL.
    - Client: `azp` or `aud` must name our client id.
    - Time: `exp` required; `exp`/`iat`/`nbf` checked with a small skew.
Realm keys are cached per certs URL; an unknown `kid` triggers one forced
refresh so a Keycloak key rotation does not lock everybody out for a TTL.
"""
from __future__ import annotations

import time
from typing import Dict, Optional

import requests
from jose import jwt
from jose.exceptions import JOSEError

from .oidc import OIDCConfig

MAX_CLOCK_SKEW_SECONDS = 5
JWKS_TTL_SECONDS = 300


class AccessTokenVerificationError(Exception):
    """Verification failed; `code` is a short machine-readable reason."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


class JWKSCache:
    """In-process JWKS cache keyed by the realm's certs endpoint."""

    def __init__(self, ttl_seconds: int = JWKS_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._keys: Dict[str, tuple[float, dict]] = {}

    def get(self, cfg: OIDCConfig, *, refresh: bool = False) -> dict:
        url = cfg.certs_endpoint
        cached = self._keys.get(url)
        if cached and not refresh and cached[0] > time.time():
            return cached[1]
        jwks = _download_jwks(url)
        self._keys[url] = (time.time() + self.ttl_seconds, jwks)
        return jwks


def _download_jwks(url: str) -> dict:
    try:
        resp = requests.get(url, timeout=5)
    except requests.RequestException as exc:
        raise AccessTokenVerificationError("jwks_fetch_failed") from exc
    if resp.status_code != 200:
        raise AccessTokenVerificationError("jwks_fetch_failed")
    try:
        body = resp.json()
    except ValueError as exc:
        raise AccessTokenVerificationError("jwks_invalid") from exc
    if not isinstance(body, dict) or not isinstance(body.get("keys"), list):
        raise AccessTokenVerificationError("jwks_invalid")
    return body


JWKS_CACHE = JWKSCache()


def _key_for(jwks: dict, kid: str) -> Optional[dict]:
    return next(
        (k for k in jwks.get("keys") or [] if isinstance(k, dict) and k.get("kid") == kid),
        None,
    )


def verify_access_token(*, access_token: str, cfg: OIDCConfig, cache=None) -> dict:
    """Return the verified claims of `access_token`.

    Raises AccessTokenVerificationError with one of: malformed_token,
    missing_kid, unknown_kid, invalid_token, invalid_audience, token_expired,
    missing_sub, jwks_fetch_failed, jwks_invalid.
    """
    cache = cache or JWKS_CACHE
    try:
        kid = jwt.get_unverified_header(access_token).get("kid")
    except JOSEError as exc:
        raise AccessTokenVerificationError("malformed_token") from exc
    if not kid:
        raise AccessTokenVerificationError("missing_kid")

    key = _key_for(cache.get(cfg), kid)
    if key is None and isinstance(cache, JWKSCache):
        key = _key_for(cache.get(cfg, refresh=True), kid)
    if key is None:
        raise AccessTokenVerificationError("unknown_kid")

    try:
        # Audience and time claims are checked below with Keycloak semantics.
        claims = jwt.decode(
            access_token,
            key,
            algorithms=["RS256"],
            issuer=cfg.issuer,
            options={
                "verify_aud": False,
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "verify_at_hash": False,
            },
        )
    except JOSEError as exc:
        raise AccessTokenVerificationError("invalid_token") from exc

    _check_client(claims, cfg.client_id)
    _check_times(claims, now=time.time())
    if not claims.get("sub"):
        raise AccessTokenVerificationError("missing_sub")
    return claims


def _check_client(claims: dict, client_id: str) -> None:
    # Keycloak access tokens name the requesting client in `azp`; `aud` is
    # usually "account" unless an audience mapper is configured.
    aud = claims.get("aud")
    audiences = aud if isinstance(aud, list) else [aud]
    if claims.get("azp") != client_id and client_id not in audiences:
        raise AccessTokenVerificationError("invalid_audience")


def _check_times(claims: dict, *, now: float) -> None:
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        raise AccessTokenVerificationError("invalid_token")
    if exp + MAX_CLOCK_SKEW_SECONDS < now:
        raise AccessTokenVerificationError("token_expired")
    for name in ("iat", "nbf"):
        value = claims.get(name)
        if isinstance(value, (int, float)) and value - MAX_CLOCK_SKEW_SECONDS > now:
            raise AccessTokenVerificationError("invalid_token")


__all__ = ["AccessTokenVerificationError", "JWKSCache", "JWKS_CACHE", "verify_access_token"]
