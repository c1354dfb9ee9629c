"""
Helpers to build the key strings of the flat key-value namespace.

Why:
    Every record and index lives under a derived key. Keeping the patterns in
    one module prevents drift between services and keeps existing data
    readable: the strings below are the persisted layout and must not change.

Conventions:
    - Users:        user:{username}, userid:{id}, all_students
    - Courses:      course:{epoch_ms}-{uuid}, teacher_courses:{username},
                    student_courses:{username}
    - Assignments:  assignment:{epoch_ms}-{uuid}, teacher_assignments:{username}
    - Submissions:  submission:{assignment_id}:{username}

Note:
    Course and assignment ids already contain their prefix (`course:...`), so
    the id *is* the storage key.
"""
from __future__ import annotations

import time
import uuid

ALL_STUDENTS_KEY = "all_students"

USER_PREFIX = "user:"
USERID_PREFIX = "userid:"
COURSE_PREFIX = "course:"
ASSIGNMENT_PREFIX = "assignment:"
SUBMISSION_PREFIX = "submission:"
TEACHER_COURSES_PREFIX = "teacher_courses:"
STUDENT_COURSES_PREFIX = "student_courses:"
TEACHER_ASSIGNMENTS_PREFIX = "teacher_assignments:"


def user_key(username: str) -> str:
    return f"{USER_PREFIX}{username}"


def userid_key(user_id: str) -> str:
    return f"{USERID_PREFIX}{user_id}"


def teacher_courses_key(username: str) -> str:
    return f"{TEACHER_COURSES_PREFIX}{username}"


def student_courses_key(username: str) -> str:
    return f"{STUDENT_COURSES_PREFIX}{username}"


def teacher_assignments_key(username: str) -> str:
    return f"{TEACHER_ASSIGNMENTS_PREFIX}{username}"


def submission_key(assignment_id: str, username: str) -> str:
    """Build the deterministic key of a student's submission.

    Returns: submission:{assignment_id}:{username}
    """
    return f"{SUBMISSION_PREFIX}{assignment_id}:{username}"


def submissions_for_assignment_prefix(assignment_id: str) -> str:
    """Prefix matching every submission of one assignment (trailing colon included)."""
    return f"{SUBMISSION_PREFIX}{assignment_id}:"


def _new_suffix(*, epoch_ms: int | None = None, uuid_hex: str | None = None) -> str:
    ms = int(time.time() * 1000) if epoch_ms is None else int(epoch_ms)
    hexpart = (uuid_hex or "").strip() or uuid.uuid4().hex
    return f"{ms}-{hexpart}"


def new_course_id(*, epoch_ms: int | None = None, uuid_hex: str | None = None) -> str:
    """Return a fresh, collision-resistant course id.

    Returns: course:{epoch_ms}-{uuid_hex}
    """
    return f"{COURSE_PREFIX}{_new_suffix(epoch_ms=epoch_ms, uuid_hex=uuid_hex)}"


def new_assignment_id(*, epoch_ms: int | None = None, uuid_hex: str | None = None) -> str:
    """Return a fresh, collision-resistant assignment id.

    Returns: assignment:{epoch_ms}-{uuid_hex}
    """
    return f"{ASSIGNMENT_PREFIX}{_new_suffix(epoch_ms=epoch_ms, uuid_hex=uuid_hex)}"


__all__ = [
    "ALL_STUDENTS_KEY",
    "USER_PREFIX",
    "USERID_PREFIX",
    "COURSE_PREFIX",
    "ASSIGNMENT_PREFIX",
    "SUBMISSION_PREFIX",
    "user_key",
    "userid_key",
    "teacher_courses_key",
    "student_courses_key",
    "teacher_assignments_key",
    "submission_key",
    "submissions_for_assignment_prefix",
    "new_course_id",
    "new_assignment_id",
]
