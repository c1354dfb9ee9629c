"""Course use cases: create, list and delete.

Why:
    Courses are plain records under `course:<id>`; who sees them is decided by
    the per-user index lists. This service keeps the record and those lists in
    step and enforces that only the creating teacher may delete a course.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from core.errors import NotFound, ValidationFailure
from identity_access.authz import ANY, TEACHER_ONLY, require_owner, require_role
from identity_access.domain import TEACHER, Identity
from storage.keys import COURSE_PREFIX, new_course_id, student_courses_key, teacher_courses_key
from storage.ports import KeyValueStore

from ..indexes import IndexMaintainer, read_id_list
from ..models import Course, utc_now_iso

logger = logging.getLogger("portal.teaching.courses")


def _normalize_text(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailure("Text fields must be strings")
    return value.strip()


def _normalize_enrolled(value: object) -> List[str]:
    """Usernames in first-seen order; duplicates and blanks dropped."""
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationFailure("enrolledStudents must be a list of usernames")
    seen: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationFailure("enrolledStudents must be a list of usernames")
        name = item.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


class CoursesService:
    def __init__(self, store: KeyValueStore, indexes: Optional[IndexMaintainer] = None) -> None:
        self._store = store
        self._indexes = indexes or IndexMaintainer(store)

    async def create_course(
        self,
        identity: Identity,
        *,
        name: Any,
        description: Any = None,
        enrolled_students: Any = None,
    ) -> dict:
        """Create a course owned by the calling teacher.

        An empty name is stored as-is; enrollment is by username and is not
        checked against the roster.
        """
        require_role(identity, TEACHER_ONLY, detail="Only teachers can create courses")
        course = Course(
            id=new_course_id(),
            name=_normalize_text(name),
            description=_normalize_text(description),
            enrolled_students=_normalize_enrolled(enrolled_students),
            created_by=identity.username,
            created_at=utc_now_iso(),
        )
        await self._store.set(course.id, course.to_record())
        await self._indexes.add_course_to_indexes(course)
        logger.info("Course created: %s by %s (%d students)", course.id, identity.username, len(course.enrolled_students))
        return course.to_record()

    async def list_courses(self, identity: Identity) -> List[dict]:
        require_role(identity, ANY)
        if identity.role == TEACHER:
            index_key = teacher_courses_key(identity.username)
        else:
            index_key = student_courses_key(identity.username)
        courses: List[dict] = []
        for course_id in await read_id_list(self._store, index_key):
            record = await self._store.get(course_id)
            if not isinstance(record, dict):
                logger.warning("Skipping dangling course id %s in %s", course_id, index_key)
                continue
            courses.append(record)
        return courses

    async def delete_course(self, identity: Identity, course_id: str) -> None:
        """Delete a course and drop it from every index that references it.

        Raises:
            Forbidden: caller is not a teacher or not the creator (nothing changes).
            NotFound: no course under `course_id`.
        """
        require_role(identity, TEACHER_ONLY, detail="Only teachers can delete courses")
        if not isinstance(course_id, str) or not course_id.startswith(COURSE_PREFIX):
            raise NotFound("Course not found")
        record = await self._store.get(course_id)
        if not isinstance(record, dict):
            raise NotFound("Course not found")
        course = Course.from_record(record)
        require_owner(identity, course.created_by, detail="You can only delete your own courses")
        course.id = course_id
        await self._indexes.remove_course_from_indexes(course)
        await self._store.delete(course_id)
        logger.info("Course deleted: %s by %s", course_id, identity.username)


__all__ = ["CoursesService"]
