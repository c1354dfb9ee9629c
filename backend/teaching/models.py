"""
Teaching records as stored in the key-value namespace.

Records keep camelCase field names on the wire and in the store; the
dataclasses expose snake_case attributes and translate at the boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

# Placeholder shown to teachers until enrollment-based counts exist.
TOTAL_STUDENTS_PLACEHOLDER = 25

SUBMISSION_PENDING = "pending"
SUBMISSION_GRADED = "graded"

# Student-facing assignment status.
STATUS_NOT_STARTED = "not_started"
STATUS_SUBMITTED = "submitted"
STATUS_GRADED = "graded"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Course:
    id: str
    name: str
    description: str
    enrolled_students: List[str]
    created_by: str
    created_at: str

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "enrolledStudents": list(self.enrolled_students),
            "createdBy": self.created_by,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict) -> "Course":
        enrolled = record.get("enrolledStudents") or []
        return cls(
            id=str(record.get("id") or ""),
            name=record.get("name") or "",
            description=record.get("description") or "",
            enrolled_students=[str(u) for u in enrolled if isinstance(u, str)],
            created_by=str(record.get("createdBy") or ""),
            created_at=str(record.get("createdAt") or ""),
        )


@dataclass
class Assignment:
    id: str
    title: str
    description: str
    due_date: Optional[str]
    max_score: Any
    created_by: str
    created_at: str
    submissions: int = 0
    total_students: int = TOTAL_STUDENTS_PLACEHOLDER

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date,
            "maxScore": self.max_score,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "submissions": self.submissions,
            "totalStudents": self.total_students,
        }


@dataclass
class Submission:
    """One student's answer to one assignment; its id is its storage key."""

    id: str
    assignment_id: str
    assignment_title: str
    student_name: str
    student_id: str
    content: str
    submitted_at: str
    max_score: Any
    status: str = SUBMISSION_PENDING
    score: Any = None
    feedback: Optional[str] = None
    graded_at: Optional[str] = None
    graded_by: Optional[str] = None
    extra: dict = field(default_factory=dict)

    def to_record(self) -> dict:
        record = dict(self.extra)
        record.update(
            {
                "id": self.id,
                "assignmentId": self.assignment_id,
                "assignmentTitle": self.assignment_title,
                "studentName": self.student_name,
                "studentId": self.student_id,
                "content": self.content,
                "submittedAt": self.submitted_at,
                "status": self.status,
                "maxScore": self.max_score,
            }
        )
        if self.status == SUBMISSION_GRADED:
            record.update(
                {
                    "score": self.score,
                    "feedback": self.feedback,
                    "gradedAt": self.graded_at,
                    "gradedBy": self.graded_by,
                }
            )
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Submission":
        known = {
            "id", "assignmentId", "assignmentTitle", "studentName", "studentId", "content",
            "submittedAt", "status", "maxScore", "score", "feedback", "gradedAt", "gradedBy",
        }
        return cls(
            id=str(record.get("id") or ""),
            assignment_id=str(record.get("assignmentId") or ""),
            assignment_title=record.get("assignmentTitle") or "",
            student_name=str(record.get("studentName") or ""),
            student_id=str(record.get("studentId") or ""),
            content=record.get("content") or "",
            submitted_at=str(record.get("submittedAt") or ""),
            max_score=record.get("maxScore"),
            status=record.get("status") or SUBMISSION_PENDING,
            score=record.get("score"),
            feedback=record.get("feedback"),
            graded_at=record.get("gradedAt"),
            graded_by=record.get("gradedBy"),
            extra={k: v for k, v in record.items() if k not in known},
        )

    def grade(self, *, score: Any, feedback: Optional[str], grader: str) -> None:
        """Mark graded; re-grading overwrites score, feedback and grader."""
        self.status = SUBMISSION_GRADED
        self.score = score
        self.feedback = feedback
        self.graded_at = utc_now_iso()
        self.graded_by = grader


__all__ = [
    "TOTAL_STUDENTS_PLACEHOLDER",
    "SUBMISSION_PENDING",
    "SUBMISSION_GRADED",
    "STATUS_NOT_STARTED",
    "STATUS_SUBMITTED",
    "STATUS_GRADED",
    "utc_now_iso",
    "Course",
    "Assignment",
    "Submission",
]
