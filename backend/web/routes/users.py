"""
Users API routes: the student roster teachers pick course members from.
"""
from __future__ import annotations

from fastapi import APIRouter, Request

from web import wiring
from web.responses import current_identity, json_private

users_router = APIRouter(tags=["Users"])  # explicit path below


@users_router.get("/api/students")
async def list_students(request: Request):
    """List every registered student as `{id, username}` (teachers only)."""
    students = await wiring.accounts_service().list_students(current_identity(request))
    return json_private({"students": students})
