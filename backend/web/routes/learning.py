"""
Learning API routes: students hand in work, both roles list submissions.

Permissions:
    - POST: students only; the submission is keyed by assignment and caller.
    - GET: teachers see submissions to their own assignments, students their own.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from web import wiring
from web.responses import current_identity, json_private

learning_router = APIRouter(tags=["Learning"])


class SubmissionCreate(BaseModel):
    assignmentId: Optional[Any] = None
    content: Optional[Any] = None


@learning_router.post("/api/submissions")
async def submit_assignment(request: Request, payload: SubmissionCreate):
    submission = await wiring.submissions_service().submit_assignment(
        current_identity(request), assignment_id=payload.assignmentId, content=payload.content
    )
    return json_private({"success": True, "submission": submission})


@learning_router.get("/api/submissions")
async def list_submissions(request: Request):
    submissions = await wiring.submissions_service().list_submissions(current_identity(request))
    return json_private({"submissions": submissions})
