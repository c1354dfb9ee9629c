"""
Response helpers shared by the auth middleware and all API routers.

Every API response is user- or role-scoped, so all of them carry
`Cache-Control: private, no-store`.
"""
from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from core.errors import PortalError, Unauthenticated
from identity_access.domain import Identity

PRIVATE_NO_STORE = {"Cache-Control": "private, no-store"}


def json_private(payload, *, status_code: int = 200, vary_origin: bool = False) -> JSONResponse:
    headers = dict(PRIVATE_NO_STORE)
    if vary_origin:
        headers["Vary"] = "Origin"
    return JSONResponse(content=payload, status_code=status_code, headers=headers)


def error_response(exc: PortalError) -> JSONResponse:
    """Translate a core failure into `{"error": kind, "detail": message}`."""
    return json_private(exc.to_payload(), status_code=exc.status_code, vary_origin=True)


def current_identity(request: Request) -> Identity:
    """Identity placed on the request by the auth middleware."""
    identity = getattr(request.state, "identity", None)
    if not isinstance(identity, Identity):
        raise Unauthenticated()
    return identity


__all__ = ["PRIVATE_NO_STORE", "json_private", "error_response", "current_identity"]
