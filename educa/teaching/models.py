"""Teaching content records: materials and assignments.

Both are authored by a teacher, never edited after creation and queried by
(grade, subject). Stored as camelCase JSON documents.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from educa.identity_access.domain import SchoolGrade, Subject, new_id


class MaterialType(str, Enum):
    VIDEO = "VIDEO"
    PDF = "PDF"
    IMAGE = "IMAGE"
    TEXT = "TEXT"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Material:
    id: str
    title: str
    description: str
    type: MaterialType
    author_id: str
    author_name: str
    grade: SchoolGrade
    subject: Subject
    created_at: str = field(default_factory=_utc_now_iso)
    content_url: Optional[str] = None
    text_content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "authorId": self.author_id,
            "authorName": self.author_name,
            "grade": self.grade.value,
            "subject": self.subject.value,
            "createdAt": self.created_at,
        }
        if self.content_url is not None:
            data["contentUrl"] = self.content_url
        if self.text_content is not None:
            data["textContent"] = self.text_content
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Material":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            type=MaterialType(data["type"]),
            author_id=str(data["authorId"]),
            author_name=str(data.get("authorName") or ""),
            grade=SchoolGrade(data["grade"]),
            subject=Subject(data["subject"]),
            created_at=str(data.get("createdAt") or ""),
            content_url=data.get("contentUrl"),
            text_content=data.get("textContent"),
        )


@dataclass(frozen=True)
class Question:
    id: str
    text: str


@dataclass(frozen=True)
class Assignment:
    id: str
    title: str
    description: str
    grade: SchoolGrade
    subject: Subject
    due_date: str
    questions: Tuple[Question, ...] = ()

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "grade": self.grade.value,
            "subject": self.subject.value,
            "dueDate": self.due_date,
            "questions": [{"id": q.id, "text": q.text} for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Assignment":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            grade=SchoolGrade(data["grade"]),
            subject=Subject(data["subject"]),
            due_date=str(data.get("dueDate") or ""),
            questions=tuple(Question(id=str(q["id"]), text=str(q["text"])) for q in data.get("questions") or ()),
        )


def new_material(
    *,
    title: str,
    description: str,
    type: MaterialType | str,
    author_id: str,
    author_name: str,
    grade: SchoolGrade | str,
    subject: Subject | str,
    content_url: Optional[str] = None,
    text_content: Optional[str] = None,
) -> Material:
    return Material(
        id=new_id(),
        title=title,
        description=description,
        type=MaterialType(type),
        author_id=author_id,
        author_name=author_name,
        grade=SchoolGrade(grade),
        subject=Subject(subject),
        content_url=content_url,
        text_content=text_content,
    )


def new_assignment(
    *,
    title: str,
    description: str,
    grade: SchoolGrade | str,
    subject: Subject | str,
    due_date: str,
    questions: list[str] | tuple[str, ...] = (),
) -> Assignment:
    return Assignment(
        id=new_id(),
        title=title,
        description=description,
        grade=SchoolGrade(grade),
        subject=Subject(subject),
        due_date=due_date,
        questions=tuple(Question(id=new_id(), text=text) for text in questions),
    )


__all__ = ["MaterialType", "Material", "Question", "Assignment", "new_material", "new_assignment"]
