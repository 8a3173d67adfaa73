"""
Data repository: the four persisted collections and their queries.

Intent:
    Hold users, materials, assignments and submissions in memory, hydrated once
    from the persistent store, and write the full affected collection back on
    every mutation ("mutate, then persist").

Ordering:
    - Users are appended (registration order).
    - Materials, assignments and submissions are prepended, so the newest item
      comes first. Views rely on this order.

Failure model:
    Store errors never escape. Reads that fail or return corrupt data fall back
    to the defaults; failed writes are logged and the in-memory state stays
    authoritative for the running process.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from educa.identity_access.domain import (
    SEED_ADMIN,
    Admin,
    Role,
    SchoolGrade,
    Student,
    Subject,
    Teacher,
    User,
    UserStatus,
    user_from_dict,
    user_to_dict,
    with_status,
)
from educa.learning.models import Submission
from educa.storage.keys import ASSIGNMENTS_KEY, MATERIALS_KEY, SUBMISSIONS_KEY, USERS_KEY
from educa.storage.ports import KeyValueStore, StorageUnavailable
from educa.teaching.models import Assignment, Material

_log = logging.getLogger("educa.data")

T = TypeVar("T")


def _load_collection(
    store: KeyValueStore,
    key: str,
    decode: Callable[[Any], T],
    default: Callable[[], List[T]],
) -> List[T]:
    """Load and decode one collection; absent, unreadable or non-list → default.

    Entries that do not decode are skipped so one bad record does not wipe the
    rest of the collection.
    """
    try:
        raw = store.load(key)
    except StorageUnavailable as exc:
        _log.warning("data.hydrate_failed key=%s reason=%s", key, exc)
        return default()
    if raw is None:
        return default()
    if not isinstance(raw, list):
        _log.warning("data.hydrate_invalid key=%s type=%s", key, type(raw).__name__)
        return default()
    items: List[T] = []
    skipped = 0
    for entry in raw:
        try:
            items.append(decode(entry))
        except (KeyError, ValueError, TypeError):
            skipped += 1
    if skipped:
        _log.warning("data.hydrate_skipped key=%s count=%s", key, skipped)
    return items


def _with_single_admin(users: List[User]) -> List[User]:
    """Keep exactly one admin: restore the seed when none decoded, drop extras."""
    admins = [u for u in users if isinstance(u, Admin)]
    if not admins:
        _log.warning("data.admin_restored id=%s", SEED_ADMIN.id)
        return [SEED_ADMIN] + users
    if len(admins) > 1:
        _log.warning("data.admin_duplicates_dropped count=%s", len(admins) - 1)
        first = admins[0]
        return [u for u in users if not isinstance(u, Admin) or u is first]
    return users


class DataRepository:
    """In-memory collections mirrored to a `KeyValueStore`.

    Build with `DataRepository.hydrate(store)` at startup. The constructor is
    for tests and tools that already hold decoded collections.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        users: Optional[Iterable[User]] = None,
        materials: Optional[Iterable[Material]] = None,
        assignments: Optional[Iterable[Assignment]] = None,
        submissions: Optional[Iterable[Submission]] = None,
    ) -> None:
        self._store = store
        self._users: List[User] = list(users) if users is not None else [SEED_ADMIN]
        self._materials: List[Material] = list(materials or ())
        self._assignments: List[Assignment] = list(assignments or ())
        self._submissions: List[Submission] = list(submissions or ())

    @classmethod
    def hydrate(cls, store: KeyValueStore) -> "DataRepository":
        """Load all four collections to completion.

        Users default to the seeded admin and always hold exactly one admin;
        the other collections default to empty.
        """
        repo = cls(
            store,
            users=_with_single_admin(
                _load_collection(store, USERS_KEY, user_from_dict, lambda: [SEED_ADMIN])
            ),
            materials=_load_collection(store, MATERIALS_KEY, Material.from_dict, list),
            assignments=_load_collection(store, ASSIGNMENTS_KEY, Assignment.from_dict, list),
            submissions=_load_collection(store, SUBMISSIONS_KEY, Submission.from_dict, list),
        )
        _log.info(
            "data.hydrated users=%s materials=%s assignments=%s submissions=%s",
            len(repo._users),
            len(repo._materials),
            len(repo._assignments),
            len(repo._submissions),
        )
        return repo

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # --- Snapshots ---------------------------------------------------------------

    @property
    def users(self) -> List[User]:
        return list(self._users)

    @property
    def materials(self) -> List[Material]:
        return list(self._materials)

    @property
    def assignments(self) -> List[Assignment]:
        return list(self._assignments)

    @property
    def submissions(self) -> List[Submission]:
        return list(self._submissions)

    # --- Persistence ---------------------------------------------------------------

    def _persist(self, key: str, payload: list) -> None:
        """Write one full collection; failures are logged, never raised."""
        try:
            self._store.save(key, payload)
        except StorageUnavailable as exc:
            _log.warning("storage.save_failed key=%s reason=%s", key, exc)

    def _persist_users(self) -> None:
        self._persist(USERS_KEY, [user_to_dict(u) for u in self._users])

    def _persist_materials(self) -> None:
        self._persist(MATERIALS_KEY, [m.to_dict() for m in self._materials])

    def _persist_assignments(self) -> None:
        self._persist(ASSIGNMENTS_KEY, [a.to_dict() for a in self._assignments])

    def _persist_submissions(self) -> None:
        self._persist(SUBMISSIONS_KEY, [s.to_dict() for s in self._submissions])

    # --- Users -----------------------------------------------------------------------

    def add_user(self, user: User) -> None:
        """Append a user. Uniqueness and required fields are the caller's concern."""
        self._users.append(user)
        self._persist_users()

    def update_user_status(self, user_id: str, status: UserStatus) -> bool:
        """Set the status of the matching user.

        Returns False (and writes nothing) when the id is unknown or names the
        admin, whose status never changes.
        """
        status = UserStatus(status)
        for idx, user in enumerate(self._users):
            if user.id != user_id:
                continue
            if isinstance(user, Admin):
                _log.warning("data.admin_status_immutable id_tail=%s", user_id[-6:])
                return False
            self._users[idx] = with_status(user, status)
            self._persist_users()
            return True
        return False

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def find_users_by_email(self, email: str) -> List[User]:
        return [u for u in self._users if u.email == email]

    def pending_teachers(self) -> List[Teacher]:
        return [u for u in self._users if isinstance(u, Teacher) and u.status is UserStatus.PENDING]

    def active_teachers(self) -> List[Teacher]:
        return [u for u in self._users if isinstance(u, Teacher) and u.status is UserStatus.ACTIVE]

    def students(self) -> List[Student]:
        return [u for u in self._users if isinstance(u, Student)]

    def users_by_role(self, role: Role) -> List[User]:
        return [u for u in self._users if u.role is Role(role)]

    def search_users(self, text: str) -> List[User]:
        """Case-insensitive substring match on name or email."""
        needle = (text or "").lower()
        return [u for u in self._users if needle in u.name.lower() or needle in u.email.lower()]

    # --- Materials & assignments -------------------------------------------------------

    def add_material(self, material: Material) -> None:
        self._materials.insert(0, material)
        self._persist_materials()

    def add_assignment(self, assignment: Assignment) -> None:
        self._assignments.insert(0, assignment)
        self._persist_assignments()

    def get_materials_by_grade(self, grade: SchoolGrade) -> List[Material]:
        return [m for m in self._materials if m.grade == grade]

    def get_assignments_by_grade(self, grade: SchoolGrade) -> List[Assignment]:
        return [a for a in self._assignments if a.grade == grade]

    def get_materials_for(self, grade: SchoolGrade, subject: Subject) -> List[Material]:
        return [m for m in self.get_materials_by_grade(grade) if m.subject == subject]

    def get_assignments_for(self, grade: SchoolGrade, subject: Subject) -> List[Assignment]:
        return [a for a in self.get_assignments_by_grade(grade) if a.subject == subject]

    def materials_by_author(self, author_id: str) -> List[Material]:
        return [m for m in self._materials if m.author_id == author_id]

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self._assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    # --- Submissions -------------------------------------------------------------------

    def submit_assignment(self, submission: Submission) -> None:
        """Prepend a submission; the assignment id and prior attempts are not checked."""
        self._submissions.insert(0, submission)
        self._persist_submissions()

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        for submission in self._submissions:
            if submission.id == submission_id:
                return submission
        return None

    def submissions_for_assignment(self, assignment_id: str) -> List[Submission]:
        return [s for s in self._submissions if s.assignment_id == assignment_id]

    def submissions_by_student(self, student_id: str) -> List[Submission]:
        return [s for s in self._submissions if s.student_id == student_id]

    def latest_submission(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        """Most recent attempt (submissions are kept newest first)."""
        for submission in self._submissions:
            if submission.assignment_id == assignment_id and submission.student_id == student_id:
                return submission
        return None

    def record_grade(
        self,
        submission_id: str,
        *,
        ai_grade: Optional[int] = None,
        ai_feedback: Optional[str] = None,
        teacher_grade: Optional[int] = None,
    ) -> Optional[Submission]:
        """Mark a submission GRADED with the given grade fields; None if unknown."""
        for idx, submission in enumerate(self._submissions):
            if submission.id != submission_id:
                continue
            updated = submission.graded(ai_grade=ai_grade, ai_feedback=ai_feedback, teacher_grade=teacher_grade)
            self._submissions[idx] = updated
            self._persist_submissions()
            return updated
        return None


__all__ = ["DataRepository"]
