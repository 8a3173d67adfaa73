"""
Authorization gate: turn (role, status) into an access verdict.

Why:
    Being logged in and being allowed to see role content are different
    things. A teacher waiting for approval may authenticate but must only see
    the "pending approval" screen. Keeping the decision a pure function lets
    the web layer, the CLI and tests share it.

Teacher status machine (administrator actions only):

    PENDING   --approve-->    ACTIVE
    PENDING   --reject--->    REJECTED
    ACTIVE    --suspend-->    SUSPENDED
    SUSPENDED --reactivate--> ACTIVE

REJECTED has no way out. Students and admins bypass the gate.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from educa.identity_access.domain import Admin, Student, Teacher, User, UserStatus


class Verdict(str, Enum):
    ALLOW = "ALLOW"
    DENY_PENDING = "DENY_PENDING"
    DENY_INACTIVE = "DENY_INACTIVE"
    DENY_UNAUTHENTICATED = "DENY_UNAUTHENTICATED"


class View(str, Enum):
    AUTH = "AUTH"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    INACTIVE = "INACTIVE"
    STUDENT_HOME = "STUDENT_HOME"
    TEACHER_HOME = "TEACHER_HOME"
    ADMIN_PANEL = "ADMIN_PANEL"


class AdminAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SUSPEND = "suspend"
    REACTIVATE = "reactivate"


class InvalidTransition(ValueError):
    """The action is not defined for the account's current status."""


_TRANSITIONS: Dict[Tuple[UserStatus, AdminAction], UserStatus] = {
    (UserStatus.PENDING, AdminAction.APPROVE): UserStatus.ACTIVE,
    (UserStatus.PENDING, AdminAction.REJECT): UserStatus.REJECTED,
    (UserStatus.ACTIVE, AdminAction.SUSPEND): UserStatus.SUSPENDED,
    (UserStatus.SUSPENDED, AdminAction.REACTIVATE): UserStatus.ACTIVE,
}


def next_status(current: UserStatus, action: AdminAction) -> UserStatus:
    """Return the status reached by applying `action` to `current`."""
    key = (UserStatus(current), AdminAction(action))
    try:
        return _TRANSITIONS[key]
    except KeyError:
        raise InvalidTransition(f"{key[1].value} is not allowed from {key[0].value}") from None


def decide(user: Optional[User]) -> Verdict:
    """Access verdict for role content.

    - No user: DENY_UNAUTHENTICATED.
    - Teacher PENDING: DENY_PENDING; SUSPENDED/REJECTED: DENY_INACTIVE.
    - Everyone else: ALLOW.
    """
    if user is None:
        return Verdict.DENY_UNAUTHENTICATED
    if isinstance(user, Teacher):
        if user.status is UserStatus.PENDING:
            return Verdict.DENY_PENDING
        if user.status is not UserStatus.ACTIVE:
            return Verdict.DENY_INACTIVE
    return Verdict.ALLOW


def is_authorized(user: Optional[User]) -> bool:
    return decide(user) is Verdict.ALLOW


def landing_view(user: Optional[User]) -> View:
    """Role dispatch for the first screen after startup or login."""
    verdict = decide(user)
    if verdict is Verdict.DENY_UNAUTHENTICATED:
        return View.AUTH
    if verdict is Verdict.DENY_PENDING:
        return View.PENDING_APPROVAL
    if verdict is Verdict.DENY_INACTIVE:
        return View.INACTIVE
    if isinstance(user, Student):
        return View.STUDENT_HOME
    if isinstance(user, Teacher):
        return View.TEACHER_HOME
    if isinstance(user, Admin):
        return View.ADMIN_PANEL
    raise TypeError(f"unknown user type: {type(user).__name__}")


__all__ = [
    "Verdict",
    "View",
    "AdminAction",
    "InvalidTransition",
    "next_status",
    "decide",
    "is_authorized",
    "landing_view",
]
