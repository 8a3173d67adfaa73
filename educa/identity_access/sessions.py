"""
Session manager: the single active identity of this application instance.

Why:
    The platform is single-tenant and single-user at a time, so "the session"
    is just the id of the current user, persisted under `educa_current_user_id`
    so that a restart resumes where the user left off.

Startup:
    Two explicit phases. First hydrate the repository completely
    (`DataRepository.hydrate`), then call `SessionManager.restore()`. Restoring
    before hydration would look the id up in the seed collection and silently
    log the user out.

Identity:
    Login is an exact, case-sensitive email lookup with no password. This is a
    prototype simplification, not a security boundary.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from educa.data.repo import DataRepository
from educa.identity_access.domain import Admin, Student, Teacher, User, initial_status, with_status
from educa.storage.keys import SESSION_KEY
from educa.storage.ports import StorageUnavailable

logger = logging.getLogger("educa.identity_access")


class RegistrationOutcome(str, Enum):
    SESSION_STARTED = "SESSION_STARTED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ADMIN_RESERVED = "ADMIN_RESERVED"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"


def _tail(value: str) -> str:
    return value[-6:] if value else ""


class SessionManager:
    def __init__(self, repo: DataRepository) -> None:
        self._repo = repo
        self._user_id: Optional[str] = None

    @property
    def current_user(self) -> Optional[User]:
        """The active user, re-read from the repository on every access."""
        if self._user_id is None:
            return None
        return self._repo.get_user(self._user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    # --- Persistence of the session marker ----------------------------------------

    def _persist_session(self, user_id: str) -> None:
        try:
            self._repo.store.save(SESSION_KEY, user_id)
        except StorageUnavailable as exc:
            logger.warning("session.save_failed reason=%s", exc)

    def _forget_session(self) -> None:
        try:
            self._repo.store.delete(SESSION_KEY)
        except StorageUnavailable as exc:
            logger.warning("session.delete_failed reason=%s", exc)

    def _start(self, user: User) -> None:
        self._user_id = user.id
        self._persist_session(user.id)

    # --- Operations --------------------------------------------------------------------

    def restore(self) -> Optional[User]:
        """Resume the persisted session, if any.

        A missing, unreadable or stale id leaves the manager logged out.
        """
        try:
            stored = self._repo.store.load(SESSION_KEY)
        except StorageUnavailable as exc:
            logger.warning("session.restore_failed reason=%s", exc)
            return None
        if not isinstance(stored, str) or not stored:
            return None
        user = self._repo.get_user(stored)
        if user is None:
            logger.info("session.restore_stale id_tail=%s", _tail(stored))
            return None
        self._user_id = user.id
        return user

    def login(self, email: str) -> bool:
        """Start a session for the single user with exactly this email."""
        matches = self._repo.find_users_by_email(email)
        if len(matches) != 1:
            if matches:
                logger.warning("session.login_ambiguous matches=%s", len(matches))
            return False
        self._start(matches[0])
        logger.info("session.login role=%s id_tail=%s", matches[0].role.value, _tail(matches[0].id))
        return True

    def register(self, user: User) -> RegistrationOutcome:
        """Add a new account; students are logged in straight away.

        Teachers get no session and must wait for approval. The stored status
        is always the role's initial one, whatever the caller set. An email
        that is already taken, or a second admin, is refused without writing
        anything.
        """
        if isinstance(user, Admin):
            return RegistrationOutcome.ADMIN_RESERVED
        if not isinstance(user, (Student, Teacher)):
            raise TypeError(f"unknown user type: {type(user).__name__}")
        if self._repo.find_users_by_email(user.email):
            return RegistrationOutcome.DUPLICATE_EMAIL
        user = with_status(user, initial_status(user.role))
        self._repo.add_user(user)
        if isinstance(user, Student):
            self._start(user)
            logger.info("session.register role=STUDENT id_tail=%s", _tail(user.id))
            return RegistrationOutcome.SESSION_STARTED
        logger.info("session.register role=TEACHER id_tail=%s pending=true", _tail(user.id))
        return RegistrationOutcome.PENDING_APPROVAL

    def logout(self) -> None:
        self._user_id = None
        self._forget_session()


__all__ = ["SessionManager", "RegistrationOutcome"]
