"""
Session routes: register, login, logout and the "who am I" probe.

Why:
    The platform has a single active identity per instance. These routes are a
    thin JSON face over `SessionManager`; the landing view in `/api/me` tells a
    client which screen to show (auth, pending approval, inactive or the role
    home) without duplicating the gate rules.

Notes:
    Login is email-only. There is no password and no token; the session lives
    in the platform state, not in a cookie.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from educa.identity_access.domain import Role, new_user, user_to_dict
from educa.identity_access.gate import decide, landing_view
from educa.identity_access.sessions import RegistrationOutcome
from educa.web.guards import error, ok, platform_of

auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("educa.web.auth")


class RegisterPayload(BaseModel):
    role: Role
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    grade: Optional[str] = None
    learning_style: Optional[str] = None
    teaching_grades: list[str] = Field(default_factory=list)
    teaching_subjects: list[str] = Field(default_factory=list)

    @field_validator("name", "email")
    @classmethod
    def _strip_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("empty")
        return v


class LoginPayload(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)


def _session_body(request: Request) -> dict:
    user = platform_of(request).sessions.current_user
    return {
        "user": user_to_dict(user) if user is not None else None,
        "verdict": decide(user).value,
        "view": landing_view(user).value,
    }


def _role_fields(payload: RegisterPayload) -> dict:
    if payload.role is Role.STUDENT:
        return {"grade": payload.grade, "learning_style": payload.learning_style}
    if payload.role is Role.TEACHER:
        return {"teaching_grades": payload.teaching_grades, "teaching_subjects": payload.teaching_subjects}
    return {}


@auth_router.post("/api/auth/register")
async def register(request: Request, payload: RegisterPayload):
    """Create a student or teacher account.

    Behavior:
        - 201 with the session body when a student registers (logged in).
        - 202 with `outcome=PENDING_APPROVAL` for teachers (no session).
        - 400 on unknown grade/subject/learning style values.
        - 403 `admin_reserved` when an admin account is requested.
        - 409 `duplicate_email` when the email is already registered.
    """
    try:
        user = new_user(payload.role, name=payload.name, email=payload.email, **_role_fields(payload))
    except ValueError:
        return error(400, "bad_request", "invalid_input")
    outcome = platform_of(request).sessions.register(user)
    if outcome is RegistrationOutcome.ADMIN_RESERVED:
        return error(403, "forbidden", "admin_reserved")
    if outcome is RegistrationOutcome.DUPLICATE_EMAIL:
        return error(409, "conflict", "duplicate_email")
    if outcome is RegistrationOutcome.PENDING_APPROVAL:
        return ok({"outcome": outcome.value, "user": user_to_dict(user)}, status_code=202)
    return ok({"outcome": outcome.value, **_session_body(request)}, status_code=201)


@auth_router.post("/api/auth/login")
async def login(request: Request, payload: LoginPayload):
    """Start a session for the account with this email.

    A pending or inactive teacher can log in; `/api/me` then reports the
    blocking view instead of the teacher home. The email must match exactly;
    no trimming or case folding.
    """
    if not platform_of(request).sessions.login(payload.email):
        return error(401, "invalid_credentials")
    return ok(_session_body(request))


@auth_router.post("/api/auth/logout")
async def logout(request: Request):
    platform_of(request).sessions.logout()
    return Response(status_code=204, headers={"Cache-Control": "private, no-store"})


@auth_router.get("/api/me")
async def me(request: Request):
    return ok(_session_body(request))


__all__ = ["auth_router"]
