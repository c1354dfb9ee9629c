"""Assignment use cases: create and role-shaped listing.

Why:
    Teachers and students look at the same records through different lenses.
    Teachers see their own assignments with a live submission count; students
    see every assignment annotated with the state of their own submission.

Notes:
    - The stored `submissions` counter is never trusted; the count is derived
      from the keys under `submission:<assignmentId>:` at read time.
    - Students see all assignments regardless of course enrollment.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from core.errors import ValidationFailure
from identity_access.authz import ANY, TEACHER_ONLY, require_role
from identity_access.domain import TEACHER, Identity
from storage.keys import (
    ASSIGNMENT_PREFIX,
    new_assignment_id,
    submission_key,
    submissions_for_assignment_prefix,
    teacher_assignments_key,
)
from storage.ports import KeyValueStore

from ..indexes import IndexMaintainer, read_id_list
from ..models import (
    STATUS_GRADED,
    STATUS_NOT_STARTED,
    STATUS_SUBMITTED,
    SUBMISSION_GRADED,
    Assignment,
    utc_now_iso,
)

logger = logging.getLogger("portal.teaching.assignments")


def _normalize_text(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailure("Text fields must be strings")
    return value.strip()


def _normalize_due_date(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure("dueDate must be a string")
    return value.strip() or None


def _normalize_max_score(value: object) -> Any:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure("maxScore must be a number")
    if value < 0:
        raise ValidationFailure("maxScore must not be negative")
    return value


class AssignmentsService:
    def __init__(self, store: KeyValueStore, indexes: Optional[IndexMaintainer] = None) -> None:
        self._store = store
        self._indexes = indexes or IndexMaintainer(store)

    async def create_assignment(
        self,
        identity: Identity,
        *,
        title: Any,
        description: Any = None,
        due_date: Any = None,
        max_score: Any = None,
    ) -> dict:
        require_role(identity, TEACHER_ONLY, detail="Only teachers can create assignments")
        assignment = Assignment(
            id=new_assignment_id(),
            title=_normalize_text(title),
            description=_normalize_text(description),
            due_date=_normalize_due_date(due_date),
            max_score=_normalize_max_score(max_score),
            created_by=identity.username,
            created_at=utc_now_iso(),
        )
        await self._store.set(assignment.id, assignment.to_record())
        await self._indexes.add_assignment_to_index(assignment)
        logger.info("Assignment created: %s by %s", assignment.id, identity.username)
        return assignment.to_record()

    async def list_assignments(self, identity: Identity) -> List[dict]:
        require_role(identity, ANY)
        if identity.role == TEACHER:
            return await self._list_for_teacher(identity)
        return await self._list_for_student(identity)

    async def _list_for_teacher(self, identity: Identity) -> List[dict]:
        index_key = teacher_assignments_key(identity.username)
        assignments: List[dict] = []
        for assignment_id in await read_id_list(self._store, index_key):
            record = await self._store.get(assignment_id)
            if not isinstance(record, dict):
                logger.warning("Skipping dangling assignment id %s in %s", assignment_id, index_key)
                continue
            submissions = await self._store.get_by_prefix(submissions_for_assignment_prefix(assignment_id))
            record["submissions"] = len(submissions)
            assignments.append(record)
        return assignments

    async def _list_for_student(self, identity: Identity) -> List[dict]:
        assignments: List[dict] = []
        for record in await self._store.get_by_prefix(ASSIGNMENT_PREFIX):
            if not isinstance(record, dict) or not record.get("id"):
                continue
            own = await self._store.get(submission_key(str(record["id"]), identity.username))
            view = dict(record)
            if isinstance(own, dict):
                view["status"] = STATUS_GRADED if own.get("status") == SUBMISSION_GRADED else STATUS_SUBMITTED
                view["submittedAt"] = own.get("submittedAt")
                # Score/feedback only exist once graded.
                for field_name in ("score", "feedback"):
                    if own.get(field_name) is not None:
                        view[field_name] = own[field_name]
            else:
                view["status"] = STATUS_NOT_STARTED
            assignments.append(view)
        return assignments


__all__ = ["AssignmentsService"]
