"""
Administrator actions on accounts: approve, reject, suspend, reactivate.

Why:
    Status changes are the only mutation an account sees after registration,
    and only an administrator may trigger them. This module checks who acts,
    asks the gate whether the transition exists, and hands the new status to
    the repository.

Behavior:
    Every action returns True when the status changed and False when it was
    refused (actor not an active admin, unknown target, admin target, or a
    transition the state machine does not define). Nothing raises.
"""
from __future__ import annotations

import logging
from typing import Optional

from educa.data.repo import DataRepository
from educa.identity_access.domain import Admin, User, UserStatus
from educa.identity_access.gate import AdminAction, InvalidTransition, next_status

logger = logging.getLogger("educa.identity_access")


class AccountAdministration:
    def __init__(self, repo: DataRepository) -> None:
        self._repo = repo

    def apply(self, actor: Optional[User], target_id: str, action: AdminAction | str) -> bool:
        try:
            action = AdminAction(action)
        except ValueError:
            return False
        if not isinstance(actor, Admin) or actor.status is not UserStatus.ACTIVE:
            logger.warning("admin.forbidden action=%s", action.value)
            return False
        target = self._repo.get_user(target_id)
        if target is None or isinstance(target, Admin):
            return False
        try:
            status = next_status(target.status, action)
        except InvalidTransition:
            logger.info(
                "admin.transition_refused action=%s from=%s id_tail=%s",
                action.value,
                target.status.value,
                target_id[-6:],
            )
            return False
        changed = self._repo.update_user_status(target_id, status)
        if changed:
            logger.info("admin.status_changed action=%s to=%s id_tail=%s", action.value, status.value, target_id[-6:])
        return changed

    def approve(self, actor: Optional[User], target_id: str) -> bool:
        return self.apply(actor, target_id, AdminAction.APPROVE)

    def reject(self, actor: Optional[User], target_id: str) -> bool:
        return self.apply(actor, target_id, AdminAction.REJECT)

    def suspend(self, actor: Optional[User], target_id: str) -> bool:
        return self.apply(actor, target_id, AdminAction.SUSPEND)

    def reactivate(self, actor: Optional[User], target_id: str) -> bool:
        return self.apply(actor, target_id, AdminAction.REACTIVATE)


__all__ = ["AccountAdministration"]
