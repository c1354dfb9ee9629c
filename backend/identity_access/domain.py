"""
Identity domain constants and simple value types.

Why:
- Centralize allowed roles to avoid drift between signup, the authorization
  gate and the web layer.
- Give the rest of the core one immutable shape for "who is calling".
"""

from __future__ import annotations

from dataclasses import dataclass

TEACHER = "teacher"
STUDENT = "student"

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({TEACHER, STUDENT})

# Synthetic mailbox domain: the identity provider keys accounts by email, the
# portal by username.
ACCOUNT_EMAIL_DOMAIN = "assignment-portal.local"


def account_email(username: str) -> str:
    return f"{username}@{ACCOUNT_EMAIL_DOMAIN}"


@dataclass(frozen=True)
class Identity:
    """Resolved caller: provider subject id plus the portal's user record."""

    id: str
    username: str
    role: str

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}


__all__ = ["TEACHER", "STUDENT", "ALLOWED_ROLES", "ACCOUNT_EMAIL_DOMAIN", "account_email", "Identity"]
