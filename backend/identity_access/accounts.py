"""
Account use cases: signup, signin and the student roster.

Why:
    Signup spans two systems: the identity provider owns the credential, the
    key-value store owns the portal's user record, the `userid:` reverse
    index and the student roster. This service sequences those writes and
    keeps the web adapter free of persistence details.

Write order (signup):
    1) provider account  2) user:<username>  3) userid:<id>  4) all_students
    A crash after (1) leaves a provider account without a portal record; the
    resolver then reports IdentityRecordMissing instead of guessing a role.

Roster:
    `all_students` keeps its historic list-of-{id, username} shape but is
    treated as a set keyed by username: re-adding a known username is a no-op.
"""
from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from core.errors import Conflict, IdentityRecordMissing, ValidationFailure
from storage.keys import ALL_STUDENTS_KEY, user_key, userid_key
from storage.ports import KeyValueStore

from .authz import TEACHER_ONLY, require_role
from .domain import ALLOWED_ROLES, STUDENT, Identity
from .provider import IdentityProvider

logger = logging.getLogger("portal.identity_access.accounts")


def _require_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure("Missing required fields")
    return value


class AccountsService:
    def __init__(self, store: KeyValueStore, provider: IdentityProvider) -> None:
        self._store = store
        self._provider = provider

    async def signup(self, *, username: Any, password: Any, role: Any) -> dict:
        """Register a teacher or student and return `{id, username, role}`.

        Raises:
            ValidationFailure: missing fields or unknown role.
            Conflict: the username is taken (in the store or at the provider).
            UpstreamFailure: the identity provider failed.
        """
        username = _require_text(username).strip()
        password = _require_text(password)
        role = _require_text(role).strip()
        if role not in ALLOWED_ROLES:
            raise ValidationFailure("Invalid role")

        if await self._store.get(user_key(username)) is not None:
            raise Conflict("Username already exists")

        subject_id = await self._provider.create_account(username=username, password=password, role=role)
        record = {
            "id": subject_id,
            "username": username,
            "role": role,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        await self._store.set(user_key(username), record)
        await self._store.set(userid_key(subject_id), username)
        if role == STUDENT:
            await self._add_to_roster(subject_id, username)
        logger.info("User signed up: %s (%s)", username, role)
        return {"id": subject_id, "username": username, "role": role}

    async def signin(self, *, username: Any, password: Any) -> dict:
        """Exchange credentials for `{accessToken, user}`."""
        if not isinstance(username, str) or not username.strip() or not isinstance(password, str) or not password:
            raise ValidationFailure("Missing credentials")
        username = username.strip()
        access_token = await self._provider.sign_in(username=username, password=password)
        user = await self._store.get(user_key(username))
        if not isinstance(user, dict):
            logger.error("Identity record missing at signin for %s", username)
            raise IdentityRecordMissing()
        return {"accessToken": access_token, "user": user}

    async def list_students(self, identity: Identity) -> list[dict]:
        require_role(identity, TEACHER_ONLY, detail="Only teachers can view students")
        roster = await self._store.get(ALL_STUDENTS_KEY)
        return list(roster) if isinstance(roster, list) else []

    async def _add_to_roster(self, subject_id: str, username: str) -> None:
        roster = await self._store.get(ALL_STUDENTS_KEY)
        roster = list(roster) if isinstance(roster, list) else []
        if any(isinstance(entry, dict) and entry.get("username") == username for entry in roster):
            return
        roster.append({"id": subject_id, "username": username})
        await self._store.set(ALL_STUDENTS_KEY, roster)


__all__ = ["AccountsService"]
