"""
Teaching API routes: courses, assignments and grading.

Why:
    Provide the teacher-facing endpoints contract-first. The middleware has
    already authenticated the caller; role and ownership checks live in the
    services, which raise `PortalError`s the app maps to JSON errors.

Notes:
    - Payload fields are optional at the model level; services validate them.
    - All responses are private, no-store (user-scoped data).
"""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from web import wiring
from web.responses import current_identity, json_private

teaching_router = APIRouter(tags=["Teaching"])  # explicit paths below


# --- Request models --------------------------------------------------------------

class CourseCreate(BaseModel):
    name: Optional[Any] = None
    description: Optional[Any] = None
    enrolledStudents: Optional[List[Any]] = None


class AssignmentCreate(BaseModel):
    title: Optional[Any] = None
    description: Optional[Any] = None
    dueDate: Optional[Any] = None
    maxScore: Optional[Any] = None


class GradePayload(BaseModel):
    submissionId: Optional[Any] = None
    score: Optional[Any] = None
    feedback: Optional[Any] = None


# --- Courses ---------------------------------------------------------------------

@teaching_router.post("/api/courses")
async def create_course(request: Request, payload: CourseCreate):
    """Create a course and enroll students by username (teacher only).

    Behavior:
        - 200 `{success, course}`
        - 403 when the caller is not a teacher
    """
    course = await wiring.courses_service().create_course(
        current_identity(request),
        name=payload.name,
        description=payload.description,
        enrolled_students=payload.enrolledStudents,
    )
    return json_private({"success": True, "course": course})


@teaching_router.get("/api/courses")
async def list_courses(request: Request):
    """Courses created by the teacher, or the courses a student is enrolled in."""
    courses = await wiring.courses_service().list_courses(current_identity(request))
    return json_private({"courses": courses})


@teaching_router.delete("/api/courses/{course_id}")
async def delete_course(request: Request, course_id: str):
    """Delete a course (owner only).

    Behavior:
        - 200 `{success: true}`
        - 404 when the course does not exist
        - 403 when the caller is not the creating teacher
    """
    await wiring.courses_service().delete_course(current_identity(request), course_id)
    return json_private({"success": True})


# --- Assignments -----------------------------------------------------------------

@teaching_router.post("/api/assignments")
async def create_assignment(request: Request, payload: AssignmentCreate):
    assignment = await wiring.assignments_service().create_assignment(
        current_identity(request),
        title=payload.title,
        description=payload.description,
        due_date=payload.dueDate,
        max_score=payload.maxScore,
    )
    return json_private({"success": True, "assignment": assignment})


@teaching_router.get("/api/assignments")
async def list_assignments(request: Request):
    """Teachers: own assignments with live submission counts. Students: all
    assignments annotated with their own submission status."""
    assignments = await wiring.assignments_service().list_assignments(current_identity(request))
    return json_private({"assignments": assignments})


# --- Grading ---------------------------------------------------------------------

@teaching_router.post("/api/grade")
async def grade_submission(request: Request, payload: GradePayload):
    submission = await wiring.submissions_service().grade_submission(
        current_identity(request),
        submission_id=payload.submissionId,
        score=payload.score,
        feedback=payload.feedback,
    )
    return json_private({"success": True, "submission": submission})
