"""
Session manager scenarios: registration, login, logout and restore.

Each "restart" builds a fresh platform over the same store with `start()`,
which hydrates the collections before restoring the session.
"""
from __future__ import annotations

import pytest

from educa.bootstrap import start
from educa.identity_access.domain import Admin, Student, Teacher, UserStatus, new_student, new_teacher
from educa.identity_access.gate import Verdict, decide
from educa.identity_access.sessions import RegistrationOutcome
from educa.learning.adapters.stub_tutor import StubTutorAdapter
from educa.learning.tutoring import TutorService
from educa.storage.keys import SESSION_KEY, USERS_KEY
from educa.storage.ports import StorageUnavailable
from educa.storage.stores import MemoryStore


def _restart(store):
    return start(store, tutor=TutorService(StubTutorAdapter()))


def test_teacher_registration_is_pending_without_session(platform):
    ana = new_teacher(name="Ana", email="ana@x.com")
    assert platform.sessions.register(ana) is RegistrationOutcome.PENDING_APPROVAL
    assert platform.repo.get_user(ana.id).status is UserStatus.PENDING
    assert platform.sessions.current_user is None
    assert platform.store.load(SESSION_KEY) is None


def test_approved_teacher_can_log_in_and_is_allowed(platform):
    ana = new_teacher(name="Ana", email="ana@x.com")
    platform.sessions.register(ana)
    platform.repo.update_user_status(ana.id, UserStatus.ACTIVE)
    assert platform.sessions.login("ana@x.com") is True
    assert decide(platform.sessions.current_user) is Verdict.ALLOW


def test_student_registration_starts_session(platform):
    leo = new_student(name="Leo", email="leo@x.com", grade="5° Ano")
    assert platform.sessions.register(leo) is RegistrationOutcome.SESSION_STARTED
    assert platform.sessions.current_user.id == leo.id
    assert platform.store.load(SESSION_KEY) == leo.id


def test_login_unknown_email_keeps_current_user(platform):
    assert platform.sessions.login("admin@educa.com") is True
    before = platform.sessions.current_user
    assert platform.sessions.login("nobody@x.com") is False
    assert platform.sessions.current_user == before


def test_login_is_exact_and_case_sensitive(platform):
    assert platform.sessions.login("ADMIN@educa.com") is False
    assert platform.sessions.login("admin@educa.com ") is False
    assert platform.sessions.current_user is None


def test_logout_then_restart_has_no_session(memory_store, platform):
    platform.sessions.login("admin@educa.com")
    platform.sessions.logout()
    assert platform.sessions.current_user is None
    assert memory_store.load(SESSION_KEY) is None
    assert _restart(memory_store).sessions.current_user is None


def test_session_survives_restart(memory_store, platform, student):
    platform.sessions.register(student)
    again = _restart(memory_store)
    assert again.sessions.current_user == student


def test_restore_with_stale_or_invalid_id_logs_out(memory_store):
    memory_store.save(SESSION_KEY, "ghost")
    assert _restart(memory_store).sessions.current_user is None
    memory_store.save(SESSION_KEY, {"id": "admin-1"})
    assert _restart(memory_store).sessions.current_user is None


def test_restore_happens_after_hydration():
    # The session points at a stored (non-seed) user, so restoring against an
    # unhydrated repository would find nobody.
    store = MemoryStore()
    first = _restart(store)
    leo = new_student(name="Leo", email="leo@x.com")
    first.sessions.register(leo)
    assert store.load(USERS_KEY)[-1]["id"] == leo.id
    assert _restart(store).sessions.current_user.id == leo.id


def test_current_user_reflects_status_changes(platform, teacher):
    platform.sessions.register(teacher)
    platform.repo.update_user_status(teacher.id, UserStatus.ACTIVE)
    platform.sessions.login(teacher.email)
    platform.repo.update_user_status(teacher.id, UserStatus.SUSPENDED)
    assert platform.sessions.current_user.status is UserStatus.SUSPENDED
    assert decide(platform.sessions.current_user) is Verdict.DENY_INACTIVE


def test_duplicate_email_is_refused(platform):
    platform.sessions.register(new_student(name="Leo", email="leo@x.com"))
    platform.sessions.logout()
    outcome = platform.sessions.register(new_teacher(name="Other Leo", email="leo@x.com"))
    assert outcome is RegistrationOutcome.DUPLICATE_EMAIL
    assert len(platform.repo.find_users_by_email("leo@x.com")) == 1
    assert platform.sessions.current_user is None


def test_admin_registration_is_reserved(platform):
    extra = Admin(id="admin-2", name="Second", email="second@educa.com")
    assert platform.sessions.register(extra) is RegistrationOutcome.ADMIN_RESERVED
    assert platform.repo.get_user("admin-2") is None


def test_register_rejects_unknown_types(platform):
    with pytest.raises(TypeError):
        platform.sessions.register(object())  # type: ignore[arg-type]


def test_ambiguous_email_login_is_refused(memory_store, caplog):
    platform = _restart(memory_store)
    platform.repo.add_user(new_student(name="A", email="twin@x.com"))
    platform.repo.add_user(new_student(name="B", email="twin@x.com"))
    with caplog.at_level("WARNING", logger="educa.identity_access"):
        assert platform.sessions.login("twin@x.com") is False
    assert any("session.login_ambiguous" in r.getMessage() for r in caplog.records)


class _SessionWriteFails(MemoryStore):
    def save(self, key, value):
        if key == SESSION_KEY:
            raise StorageUnavailable("read-only")
        super().save(key, value)


def test_session_write_failure_keeps_in_memory_session():
    platform = _restart(_SessionWriteFails())
    assert platform.sessions.login("admin@educa.com") is True
    assert platform.sessions.is_authenticated


def test_register_stores_the_initial_status_for_the_role(platform):
    eager = Teacher(id="t1", name="Eager", email="eager@x.com", status=UserStatus.ACTIVE)
    assert platform.sessions.register(eager) is RegistrationOutcome.PENDING_APPROVAL
    assert platform.repo.get_user("t1").status is UserStatus.PENDING
    assert platform.store.load(USERS_KEY)[-1]["status"] == "PENDING"

    banned = Student(id="s1", name="Leo", email="leo@x.com", status=UserStatus.SUSPENDED)
    platform.sessions.register(banned)
    assert platform.repo.get_user("s1").status is UserStatus.ACTIVE
    assert platform.sessions.current_user.status is UserStatus.ACTIVE
