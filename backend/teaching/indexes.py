"""
Denormalized index maintenance for courses and assignments.

Why:
    The key-value store has no secondary indexes. Reads go through per-user id
    lists (`teacher_courses:<u>`, `student_courses:<u>`,
    `teacher_assignments:<u>`) so listing never scans the keyspace. Every
    mutation site calls into this module explicitly.

Behavior:
    - Appends skip ids already present, so a retried create cannot duplicate.
    - Removal filters by value equality; removing twice is a no-op.
    - Multi-key updates are independent read-modify-write steps (no
      transaction); callers order them record-before-index on create and
      index-before-record on delete.
"""
from __future__ import annotations

import logging
from typing import List

from storage.keys import student_courses_key, teacher_assignments_key, teacher_courses_key
from storage.ports import KeyValueStore

from .models import Assignment, Course

logger = logging.getLogger("portal.teaching.indexes")


async def read_id_list(store: KeyValueStore, key: str) -> List[str]:
    value = await store.get(key)
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, str)]


class IndexMaintainer:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def _append(self, key: str, entity_id: str) -> None:
        ids = await read_id_list(self._store, key)
        if entity_id in ids:
            return
        ids.append(entity_id)
        await self._store.set(key, ids)

    async def _remove(self, key: str, entity_id: str) -> None:
        ids = await read_id_list(self._store, key)
        remaining = [i for i in ids if i != entity_id]
        if len(remaining) == len(ids):
            return
        await self._store.set(key, remaining)

    async def add_course_to_indexes(self, course: Course) -> None:
        await self._append(teacher_courses_key(course.created_by), course.id)
        for username in course.enrolled_students:
            await self._append(student_courses_key(username), course.id)

    async def remove_course_from_indexes(self, course: Course) -> None:
        await self._remove(teacher_courses_key(course.created_by), course.id)
        for username in course.enrolled_students:
            await self._remove(student_courses_key(username), course.id)

    async def add_assignment_to_index(self, assignment: Assignment) -> None:
        await self._append(teacher_assignments_key(assignment.created_by), assignment.id)


__all__ = ["IndexMaintainer", "read_id_list"]
