"""
Shared request helpers for the JSON routes.

Design:
    Routes call `require_role(request, ...)` and get back either the active
    user or a ready-made error response. Error payloads always have the shape
    `{"error": ..., "detail"?: ...}` and are never cached.
"""
from __future__ import annotations

from typing import Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse

from educa.bootstrap import Platform
from educa.identity_access.domain import Role, User
from educa.identity_access.gate import Verdict, decide


def private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def error(status_code: int, code: str, detail: str | None = None) -> JSONResponse:
    payload = {"error": code}
    if detail:
        payload["detail"] = detail
    return JSONResponse(payload, status_code=status_code, headers=private_no_store())


def ok(payload, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=private_no_store())


def platform_of(request: Request) -> Platform:
    return request.app.state.platform


def require_role(request: Request, *roles: Role) -> Tuple[Optional[User], Optional[JSONResponse]]:
    """Ensure the session user passes the gate and has one of `roles`.

    - No session: 401 unauthenticated.
    - Teacher not yet approved: 403 pending_approval; suspended/rejected: 403
      account_inactive.
    - Wrong role: 403 forbidden.
    """
    user = platform_of(request).sessions.current_user
    verdict = decide(user)
    if verdict is Verdict.DENY_UNAUTHENTICATED:
        return None, error(401, "unauthenticated")
    if verdict is Verdict.DENY_PENDING:
        return None, error(403, "forbidden", "pending_approval")
    if verdict is Verdict.DENY_INACTIVE:
        return None, error(403, "forbidden", "account_inactive")
    if roles and user.role not in roles:
        return None, error(403, "forbidden")
    return user, None


__all__ = ["private_no_store", "error", "ok", "platform_of", "require_role"]
