"""
Authentication-related FastAPI routes (router-only module).

Why:
    Signup and signin are the only API operations reachable without a bearer
    token. They delegate to the account service, which talks to the identity
    provider and keeps the portal's user records in the key-value store.

Notes:
    - Payload fields are optional at the model level so that missing fields
      surface as the contract's 400 `validation_failed`, not FastAPI's 422.
    - Never log passwords or tokens.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from web import wiring
from web.responses import json_private

auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix


class SignupPayload(BaseModel):
    username: Optional[Any] = None
    password: Optional[Any] = None
    role: Optional[Any] = None


class SigninPayload(BaseModel):
    username: Optional[Any] = None
    password: Optional[Any] = None


@auth_router.post("/api/signup")
async def signup(payload: SignupPayload):
    """Register a teacher or student.

    Behavior:
        - 200 `{success, user: {id, username, role}}`
        - 400 on missing fields or unknown role
        - 409 when the username is taken
        - 502 when the identity provider fails
    """
    user = await wiring.accounts_service().signup(
        username=payload.username, password=payload.password, role=payload.role
    )
    return json_private({"success": True, "user": user})


@auth_router.post("/api/signin")
async def signin(payload: SigninPayload):
    """Exchange username/password for a bearer access token.

    Behavior:
        - 200 `{success, accessToken, user}`
        - 400 on missing fields, 401 on bad credentials
    """
    result = await wiring.accounts_service().signin(username=payload.username, password=payload.password)
    return json_private({"success": True, "accessToken": result["accessToken"], "user": result["user"]})
