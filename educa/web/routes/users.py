"""
Administrator routes for account listing and status changes.

Permissions:
    Every endpoint requires an active ADMIN session. Teachers waiting for
    approval are listed with `?status=PENDING`.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request

from educa.identity_access.domain import Admin, Role, UserStatus, user_to_dict
from educa.identity_access.gate import AdminAction
from educa.web.guards import error, ok, platform_of, require_role

users_router = APIRouter(tags=["Users"])
logger = logging.getLogger("educa.web.users")


@users_router.get("/api/admin/users")
async def list_users(request: Request, q: Optional[str] = None, status: Optional[str] = None):
    """List accounts, optionally filtered by name/email text and status."""
    _, err = require_role(request, Role.ADMIN)
    if err:
        return err
    repo = platform_of(request).repo
    users = repo.search_users(q) if q else repo.users
    if status:
        try:
            wanted = UserStatus(status.strip().upper())
        except ValueError:
            return error(400, "bad_request", "invalid_status")
        users = [u for u in users if u.status is wanted]
    return ok([user_to_dict(u) for u in users])


@users_router.post("/api/admin/users/{user_id}/{action}")
async def change_status(request: Request, user_id: str, action: str):
    """Apply approve/reject/suspend/reactivate to one account.

    Behavior:
        - 200 with the updated user.
        - 400 for an unknown action.
        - 404 for an unknown user.
        - 409 when the account is an admin or the transition is not allowed
          from its current status (e.g. approving a rejected teacher).
    """
    actor, err = require_role(request, Role.ADMIN)
    if err:
        return err
    try:
        admin_action = AdminAction(action.strip().lower())
    except ValueError:
        return error(400, "bad_request", "invalid_action")
    platform = platform_of(request)
    target = platform.repo.get_user(user_id)
    if target is None:
        return error(404, "not_found")
    if isinstance(target, Admin):
        return error(409, "conflict", "admin_immutable")
    if not platform.admin.apply(actor, user_id, admin_action):
        return error(409, "conflict", "invalid_transition")
    return ok(user_to_dict(platform.repo.get_user(user_id)))


__all__ = ["users_router"]
