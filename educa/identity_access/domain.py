"""
Identity domain: roles, account statuses and the User variants.

Why:
- A user is exactly one of Student, Teacher or Admin. Modelling them as
  separate record types keeps teacher-only fields off students and vice versa,
  instead of one record with mutually exclusive optional fields.
- Keep the vocabularies (grades, subjects, learning styles) in one place so
  repository, web layer and CLI agree on spelling.

Storage shape: `user_to_dict` / `user_from_dict` speak the camelCase JSON
documents stored under `educa_users`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union
from uuid import uuid4


class Role(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    PENDING = "PENDING"  # teachers waiting for approval
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    REJECTED = "REJECTED"


class LearningStyle(str, Enum):
    VISUAL = "Visual"
    AUDITORY = "Auditivo"
    KINESTHETIC = "Cinestésico"
    READING = "Leitura/Escrita"


class SchoolGrade(str, Enum):
    GRADE_1 = "1° Ano"
    GRADE_2 = "2° Ano"
    GRADE_3 = "3° Ano"
    GRADE_4 = "4° Ano"
    GRADE_5 = "5° Ano"
    GRADE_6 = "6° Ano"
    GRADE_7 = "7° Ano"
    GRADE_8 = "8° Ano"
    GRADE_9 = "9° Ano"


class Subject(str, Enum):
    PORTUGUESE = "Português"
    MATH = "Matemática"
    HISTORY = "História"
    SCIENCE = "Ciências"
    GEOGRAPHY = "Geografia"
    ARTS = "Arte"
    IT = "Informática"
    LIBRAS = "Libras"
    PE = "Educação Física"


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    email: str
    status: UserStatus = UserStatus.ACTIVE
    grade: Optional[SchoolGrade] = None
    learning_style: Optional[LearningStyle] = None

    role: ClassVar[Role] = Role.STUDENT


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    email: str
    status: UserStatus = UserStatus.PENDING
    teaching_grades: Tuple[SchoolGrade, ...] = ()
    teaching_subjects: Tuple[Subject, ...] = ()

    role: ClassVar[Role] = Role.TEACHER


@dataclass(frozen=True)
class Admin:
    id: str
    name: str
    email: str
    status: UserStatus = UserStatus.ACTIVE

    role: ClassVar[Role] = Role.ADMIN


User = Union[Student, Teacher, Admin]

SEED_ADMIN = Admin(
    id="admin-1",
    name="Administrador Principal",
    email="admin@educa.com",
    status=UserStatus.ACTIVE,
)


def initial_status(role: Role) -> UserStatus:
    """Teachers start PENDING; students and admins start ACTIVE."""
    return UserStatus.PENDING if role is Role.TEACHER else UserStatus.ACTIVE


def new_student(
    *,
    name: str,
    email: str,
    grade: SchoolGrade | str | None = None,
    learning_style: LearningStyle | str | None = None,
) -> Student:
    return Student(
        id=new_id(),
        name=name,
        email=email,
        status=initial_status(Role.STUDENT),
        grade=SchoolGrade(grade) if grade is not None else None,
        learning_style=LearningStyle(learning_style) if learning_style is not None else None,
    )


def new_teacher(
    *,
    name: str,
    email: str,
    teaching_grades: tuple | list = (),
    teaching_subjects: tuple | list = (),
) -> Teacher:
    return Teacher(
        id=new_id(),
        name=name,
        email=email,
        status=initial_status(Role.TEACHER),
        teaching_grades=tuple(SchoolGrade(g) for g in teaching_grades),
        teaching_subjects=tuple(Subject(s) for s in teaching_subjects),
    )


def new_user(role: Role | str, *, name: str, email: str, **fields: Any) -> User:
    """Build a fresh user of the given role with its initial status.

    Role-specific keyword fields (grade, learning_style, teaching_grades,
    teaching_subjects) that do not belong to the role are rejected.
    """
    role = Role(role)
    if role is Role.STUDENT:
        return new_student(name=name, email=email, **fields)
    if role is Role.TEACHER:
        return new_teacher(name=name, email=email, **fields)
    if fields:
        raise TypeError(f"unexpected fields for admin: {sorted(fields)}")
    return Admin(id=new_id(), name=name, email=email, status=initial_status(Role.ADMIN))


def with_status(user: User, status: UserStatus) -> User:
    return replace(user, status=UserStatus(status))


# --- Storage codec -------------------------------------------------------------


def user_to_dict(user: User) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "status": user.status.value,
    }
    if isinstance(user, Student):
        if user.grade is not None:
            data["grade"] = user.grade.value
        if user.learning_style is not None:
            data["learningStyle"] = user.learning_style.value
    elif isinstance(user, Teacher):
        data["teachingGrades"] = [g.value for g in user.teaching_grades]
        data["teachingSubjects"] = [s.value for s in user.teaching_subjects]
    return data


def user_from_dict(data: Mapping[str, Any]) -> User:
    """Decode a stored user document.

    Raises `KeyError`/`ValueError` for documents that do not describe a valid
    user; the repository skips those entries.
    """
    role = Role(data["role"])
    common = {
        "id": str(data["id"]),
        "name": str(data["name"]),
        "email": str(data["email"]),
        "status": UserStatus(data.get("status") or initial_status(role)),
    }
    if role is Role.STUDENT:
        grade = data.get("grade")
        style = data.get("learningStyle")
        return Student(
            **common,
            grade=SchoolGrade(grade) if grade else None,
            learning_style=LearningStyle(style) if style else None,
        )
    if role is Role.TEACHER:
        return Teacher(
            **common,
            teaching_grades=tuple(SchoolGrade(g) for g in data.get("teachingGrades") or ()),
            teaching_subjects=tuple(Subject(s) for s in data.get("teachingSubjects") or ()),
        )
    return Admin(**common)


__all__ = [
    "Role",
    "UserStatus",
    "LearningStyle",
    "SchoolGrade",
    "Subject",
    "Student",
    "Teacher",
    "Admin",
    "User",
    "SEED_ADMIN",
    "initial_status",
    "new_id",
    "new_student",
    "new_teacher",
    "new_user",
    "with_status",
    "user_to_dict",
    "user_from_dict",
]
