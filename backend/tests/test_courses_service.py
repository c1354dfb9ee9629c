"""
Course service: create/list/delete with index consistency and ownership.
"""
from __future__ import annotations

import pytest

from core.errors import Forbidden, NotFound, ValidationFailure
from teaching.services.courses import CoursesService
from fakes import identity


pytestmark = pytest.mark.anyio("asyncio")

TOM = identity("tom", "teacher")
TINA = identity("tina", "teacher")
S1 = identity("s1", "student")
S2 = identity("s2", "student")


async def test_create_course_stores_record_and_indexes(store):
    course = await CoursesService(store).create_course(
        TOM, name="Math", description="Algebra", enrolled_students=["s1", "s2"]
    )
    assert course["id"].startswith("course:")
    assert course["createdBy"] == "tom"
    assert course["enrolledStudents"] == ["s1", "s2"]
    assert await store.get(course["id"]) == course
    assert await store.get("teacher_courses:tom") == [course["id"]]
    assert await store.get("student_courses:s1") == [course["id"]]


async def test_create_course_defaults_and_empty_name(store):
    course = await CoursesService(store).create_course(TOM, name="")
    assert course["name"] == ""
    assert course["description"] == ""
    assert course["enrolledStudents"] == []


async def test_create_course_rejects_non_list_enrollment(store):
    with pytest.raises(ValidationFailure):
        await CoursesService(store).create_course(TOM, name="Math", enrolled_students="s1")


async def test_students_cannot_create_courses(store):
    with pytest.raises(Forbidden):
        await CoursesService(store).create_course(S1, name="Hack")
    assert store.keys() == []


async def test_course_ids_are_unique_for_back_to_back_creates(store):
    svc = CoursesService(store)
    ids = {(await svc.create_course(TOM, name=f"c{i}"))["id"] for i in range(10)}
    assert len(ids) == 10
    assert len(await store.get("teacher_courses:tom")) == 10


async def test_list_courses_by_role(store):
    svc = CoursesService(store)
    c1 = await svc.create_course(TOM, name="C1", enrolled_students=["s1", "s2"])
    c2 = await svc.create_course(TOM, name="C2", enrolled_students=["s2"])
    await svc.create_course(TINA, name="Other", enrolled_students=["s1"])

    assert [c["id"] for c in await svc.list_courses(TOM)] == [c1["id"], c2["id"]]
    assert [c["id"] for c in await svc.list_courses(S2)] == [c1["id"], c2["id"]]
    assert len(await svc.list_courses(S1)) == 2
    assert await svc.list_courses(identity("nobody", "student")) == []


async def test_list_courses_skips_dangling_ids(store):
    await store.set("student_courses:s1", ["course:gone"])
    assert await CoursesService(store).list_courses(S1) == []


async def test_delete_course_cleans_every_index(store):
    svc = CoursesService(store)
    c1 = await svc.create_course(TOM, name="C1", enrolled_students=["s1", "s2"])
    await svc.delete_course(TOM, c1["id"])

    assert await store.get(c1["id"]) is None
    assert await store.get("teacher_courses:tom") == []
    assert await svc.list_courses(S1) == []
    assert await svc.list_courses(S2) == []


async def test_delete_by_non_owner_is_forbidden_without_mutation(store):
    svc = CoursesService(store)
    c1 = await svc.create_course(TOM, name="C1", enrolled_students=["s1"])
    before = {k: await store.get(k) for k in store.keys()}

    with pytest.raises(Forbidden):
        await svc.delete_course(TINA, c1["id"])
    with pytest.raises(Forbidden):
        await svc.delete_course(S1, c1["id"])

    assert {k: await store.get(k) for k in store.keys()} == before


async def test_delete_missing_course_is_not_found(store):
    svc = CoursesService(store)
    with pytest.raises(NotFound):
        await svc.delete_course(TOM, "course:0-missing")
    # Keys outside the course namespace are never treated as courses.
    await store.set("user:tom", {"id": "sub", "username": "tom", "role": "teacher", "createdBy": "tom"})
    with pytest.raises(NotFound):
        await svc.delete_course(TOM, "user:tom")
    assert await store.get("user:tom") is not None
