"""Submission use cases: submit, list and grade.

Why:
    A submission lives at the deterministic key
    `submission:<assignmentId>:<username>`, which alone guarantees at most one
    submission per student and assignment: resubmitting overwrites it. There is
    no submission index; reads are prefix scans.

Permissions:
    - submit: students only, on an existing assignment.
    - list: teachers see submissions to their own assignments, students their own.
    - grade: any teacher may grade any submission.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from core.errors import NotFound, ValidationFailure
from identity_access.authz import ANY, STUDENT_ONLY, TEACHER_ONLY, require_role
from identity_access.domain import TEACHER, Identity
from storage.keys import (
    ASSIGNMENT_PREFIX,
    SUBMISSION_PREFIX,
    submission_key,
    submissions_for_assignment_prefix,
    teacher_assignments_key,
)
from storage.ports import KeyValueStore

from ..indexes import read_id_list
from ..models import Submission, utc_now_iso

logger = logging.getLogger("portal.teaching.submissions")


def _normalize_content(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailure("content must be a string")
    return value


def _normalize_score(value: object) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure("score must be a number")
    return value


def _normalize_feedback(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure("feedback must be a string")
    return value


class SubmissionsService:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def submit_assignment(self, identity: Identity, *, assignment_id: Any, content: Any) -> dict:
        """Create or replace the caller's submission for an assignment.

        The assignment's title and maxScore are copied into the submission so
        later edits to the assignment do not rewrite history.
        """
        require_role(identity, STUDENT_ONLY, detail="Only students can submit assignments")
        if not isinstance(assignment_id, str) or not assignment_id.startswith(ASSIGNMENT_PREFIX):
            raise NotFound("Assignment not found")
        assignment = await self._store.get(assignment_id)
        if not isinstance(assignment, dict):
            raise NotFound("Assignment not found")
        submission = Submission(
            id=submission_key(assignment_id, identity.username),
            assignment_id=assignment_id,
            assignment_title=assignment.get("title") or "",
            student_name=identity.username,
            student_id=identity.id,
            content=_normalize_content(content),
            submitted_at=utc_now_iso(),
            max_score=assignment.get("maxScore"),
        )
        await self._store.set(submission.id, submission.to_record())
        logger.info("Submission stored: %s", submission.id)
        return submission.to_record()

    async def list_submissions(self, identity: Identity) -> List[dict]:
        require_role(identity, ANY)
        if identity.role == TEACHER:
            submissions: List[dict] = []
            for assignment_id in await read_id_list(self._store, teacher_assignments_key(identity.username)):
                found = await self._store.get_by_prefix(submissions_for_assignment_prefix(assignment_id))
                submissions.extend(s for s in found if isinstance(s, dict))
            return submissions
        return [
            s
            for s in await self._store.get_by_prefix(SUBMISSION_PREFIX)
            if isinstance(s, dict) and s.get("studentName") == identity.username
        ]

    async def grade_submission(self, identity: Identity, *, submission_id: Any, score: Any, feedback: Any = None) -> dict:
        """Grade (or re-grade) a submission; identifying fields never change."""
        require_role(identity, TEACHER_ONLY, detail="Only teachers can grade submissions")
        if not isinstance(submission_id, str) or not submission_id.startswith(SUBMISSION_PREFIX):
            raise NotFound("Submission not found")
        record = await self._store.get(submission_id)
        if not isinstance(record, dict):
            raise NotFound("Submission not found")
        submission = Submission.from_record(record)
        submission.id = submission_id
        submission.grade(score=_normalize_score(score), feedback=_normalize_feedback(feedback), grader=identity.username)
        await self._store.set(submission_id, submission.to_record())
        logger.info("Submission graded: %s by %s", submission_id, identity.username)
        return submission.to_record()


__all__ = ["SubmissionsService"]
