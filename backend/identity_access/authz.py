"""
Authorization gate: per-operation role checks.

Every entity-service operation declares its allowed role set up front and calls
`require_role` before it touches the store. The check is pure (no I/O) so it can
be unit tested and reasoned about in isolation.
"""
from __future__ import annotations

from typing import AbstractSet

from core.errors import Forbidden

from .domain import ALLOWED_ROLES, STUDENT, TEACHER, Identity

TEACHER_ONLY = frozenset({TEACHER})
STUDENT_ONLY = frozenset({STUDENT})
# Any authenticated role
ANY = ALLOWED_ROLES


def require_role(identity: Identity, allowed_roles: AbstractSet[str], *, detail: str | None = None) -> None:
    """Raise Forbidden unless the caller's role is in `allowed_roles`.

    Parameters
    ----------
    identity:
        Caller resolved by the identity resolver (authentication already done).
    allowed_roles:
        TEACHER_ONLY, STUDENT_ONLY, ANY or another subset of ALLOWED_ROLES.
    detail:
        Optional human message for the 403 body.
    """
    if identity.role not in allowed_roles:
        raise Forbidden(detail)


def require_owner(identity: Identity, owner_username: str | None, *, detail: str | None = None) -> None:
    """Raise Forbidden unless the caller is the recorded owner of a resource."""
    if not owner_username or identity.username != owner_username:
        raise Forbidden(detail)


__all__ = ["TEACHER_ONLY", "STUDENT_ONLY", "ANY", "require_role", "require_owner"]
