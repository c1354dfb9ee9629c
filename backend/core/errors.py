"""
Error taxonomy for the assignment portal core.

Why:
    Services raise these instead of returning status codes so the web adapter
    can map every failure to a stable, machine-checkable `kind` plus a human
    message without knowing which service produced it.

Mapping (kind -> HTTP status):
    unauthenticated -> 401, forbidden -> 403, not_found -> 404,
    validation_failed -> 400, conflict -> 409, upstream_failure -> 502
"""
from __future__ import annotations


class PortalError(Exception):
    """Base class for failures reported to the caller of a core operation."""

    kind = "internal_error"
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.detail}


class AuthFailure(PortalError):
    """Authentication or authorization failed for the current request."""


class Unauthenticated(AuthFailure):
    kind = "unauthenticated"
    status_code = 401
    default_detail = "Unauthorized"


class IdentityRecordMissing(Unauthenticated):
    """The credential is valid but the user records in the store are not.

    Indicates index drift between `userid:<id>` and `user:<username>`; callers
    must log it rather than fall back to a default role.
    """

    default_detail = "User record not found for authenticated subject"


class Forbidden(AuthFailure):
    kind = "forbidden"
    status_code = 403
    default_detail = "Forbidden"


class NotFound(PortalError):
    kind = "not_found"
    status_code = 404
    default_detail = "Not found"


class ValidationFailure(PortalError):
    kind = "validation_failed"
    status_code = 400
    default_detail = "Missing required fields"


class Conflict(ValidationFailure):
    kind = "conflict"
    status_code = 409
    default_detail = "Already exists"


class UpstreamFailure(PortalError):
    """The identity provider or the key-value store call failed."""

    kind = "upstream_failure"
    status_code = 502
    default_detail = "Upstream service failed"


__all__ = [
    "PortalError",
    "AuthFailure",
    "Unauthenticated",
    "IdentityRecordMissing",
    "Forbidden",
    "NotFound",
    "ValidationFailure",
    "Conflict",
    "UpstreamFailure",
]
