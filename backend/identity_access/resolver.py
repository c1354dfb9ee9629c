"""
Identity resolver: bearer credential -> Identity(id, username, role).

Why:
    Every protected operation starts here. The provider vouches for the
    credential and yields a subject id; the portal's own records
    (`userid:<id>` -> username, `user:<username>` -> role) decide who the caller
    is inside the portal.

Behavior:
    - Missing/blank header, non-Bearer scheme or empty token -> Unauthenticated.
    - Any provider verification failure -> Unauthenticated (uniformly).
    - Either store lookup missing -> IdentityRecordMissing, logged as an error:
      it means the user records drifted apart and must not be papered over
      with a default role.
"""
from __future__ import annotations

import logging

from core.errors import IdentityRecordMissing, Unauthenticated
from storage.keys import user_key, userid_key
from storage.ports import KeyValueStore

from .domain import ALLOWED_ROLES, Identity
from .provider import IdentityProvider

logger = logging.getLogger("portal.identity_access.resolver")


def parse_bearer(authorization: str | None) -> str:
    """Extract the credential from an `Authorization: Bearer <token>` header value."""
    if not authorization or not isinstance(authorization, str):
        raise Unauthenticated()
    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise Unauthenticated()
    return parts[1].strip()


class IdentityResolver:
    def __init__(self, store: KeyValueStore, provider: IdentityProvider) -> None:
        self._store = store
        self._provider = provider

    async def resolve(self, authorization: str | None) -> Identity:
        credential = parse_bearer(authorization)
        try:
            subject_id = await self._provider.verify(credential)
        except Unauthenticated:
            raise
        except Exception as exc:
            # Provider outages included: every verification failure is a 401.
            logger.warning("Credential verification errored: %s", exc.__class__.__name__)
            raise Unauthenticated() from exc

        username = await self._store.get(userid_key(subject_id))
        if not username:
            logger.error("Identity record missing: no username for subject %s", subject_id)
            raise IdentityRecordMissing()
        record = await self._store.get(user_key(str(username)))
        if not isinstance(record, dict):
            logger.error("Identity record missing: no user record for %s (subject %s)", username, subject_id)
            raise IdentityRecordMissing()
        role = record.get("role")
        if role not in ALLOWED_ROLES:
            logger.error("Identity record invalid: unknown role for %s", username)
            raise IdentityRecordMissing("User record has no valid role")
        return Identity(id=str(subject_id), username=str(username), role=str(role))


__all__ = ["parse_bearer", "IdentityResolver"]
