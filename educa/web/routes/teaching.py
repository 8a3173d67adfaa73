"""
Teaching routes: materials and assignments.

Why:
    Teachers publish content for a (grade, subject) pair; students read what
    belongs to their own grade. Content is immutable once published, so there
    are only list and create endpoints.

Permissions:
    - Reading requires an authorized session (approved teacher, student or admin).
    - Publishing requires an approved teacher.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field, field_validator

from educa.identity_access.domain import Role, SchoolGrade, Student, Subject
from educa.teaching.models import new_assignment, new_material
from educa.web.guards import error, ok, platform_of, require_role

teaching_router = APIRouter(tags=["Teaching"])
logger = logging.getLogger("educa.web.teaching")


class MaterialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    type: str
    grade: str
    subject: str
    content_url: Optional[str] = Field(default=None, max_length=2000)
    text_content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("empty")
        return v


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    grade: str
    subject: str
    due_date: str = Field(..., min_length=1, max_length=40)
    questions: list[str] = Field(..., min_length=1)

    @field_validator("questions")
    @classmethod
    def _non_blank_questions(cls, v: list[str]) -> list[str]:
        cleaned = [q.strip() for q in v if q and q.strip()]
        if not cleaned:
            raise ValueError("no questions")
        return cleaned


def _content_filter(user, grade: Optional[str], subject: Optional[str]):
    """Resolve the (grade, subject) filter for a listing.

    Students are pinned to their own grade; others may pass any grade.
    Raises ValueError for unknown values.
    """
    if isinstance(user, Student):
        wanted_grade = user.grade
    else:
        wanted_grade = SchoolGrade(grade) if grade else None
    wanted_subject = Subject(subject) if subject else None
    return wanted_grade, wanted_subject


def _matches(item, grade: Optional[SchoolGrade], subject: Optional[Subject]) -> bool:
    if grade is not None and item.grade is not grade:
        return False
    if subject is not None and item.subject is not subject:
        return False
    return True


@teaching_router.get("/api/materials")
async def list_materials(request: Request, grade: Optional[str] = None, subject: Optional[str] = None):
    """List materials, newest first.

    Students without a grade on record see an empty list.
    """
    user, err = require_role(request)
    if err:
        return err
    try:
        wanted_grade, wanted_subject = _content_filter(user, grade, subject)
    except ValueError:
        return error(400, "bad_request", "invalid_filter")
    if isinstance(user, Student) and wanted_grade is None:
        return ok([])
    items = [m for m in platform_of(request).repo.materials if _matches(m, wanted_grade, wanted_subject)]
    return ok([m.to_dict() for m in items])


@teaching_router.post("/api/materials")
async def create_material(request: Request, payload: MaterialCreate):
    """Publish a material authored by the calling teacher (201)."""
    user, err = require_role(request, Role.TEACHER)
    if err:
        return err
    try:
        material = new_material(
            title=payload.title,
            description=payload.description,
            type=payload.type,
            author_id=user.id,
            author_name=user.name,
            grade=payload.grade,
            subject=payload.subject,
            content_url=payload.content_url,
            text_content=payload.text_content,
        )
    except ValueError:
        return error(400, "bad_request", "invalid_input")
    platform_of(request).repo.add_material(material)
    logger.info("teaching.material.created type=%s grade=%s", material.type.value, material.grade.value)
    return ok(material.to_dict(), status_code=201)


@teaching_router.get("/api/assignments")
async def list_assignments(request: Request, grade: Optional[str] = None, subject: Optional[str] = None):
    user, err = require_role(request)
    if err:
        return err
    try:
        wanted_grade, wanted_subject = _content_filter(user, grade, subject)
    except ValueError:
        return error(400, "bad_request", "invalid_filter")
    if isinstance(user, Student) and wanted_grade is None:
        return ok([])
    items = [a for a in platform_of(request).repo.assignments if _matches(a, wanted_grade, wanted_subject)]
    return ok([a.to_dict() for a in items])


@teaching_router.post("/api/assignments")
async def create_assignment(request: Request, payload: AssignmentCreate):
    """Publish an assignment with one or more questions (teacher only)."""
    _, err = require_role(request, Role.TEACHER)
    if err:
        return err
    try:
        assignment = new_assignment(
            title=payload.title.strip(),
            description=payload.description,
            grade=payload.grade,
            subject=payload.subject,
            due_date=payload.due_date,
            questions=payload.questions,
        )
    except ValueError:
        return error(400, "bad_request", "invalid_input")
    platform_of(request).repo.add_assignment(assignment)
    logger.info("teaching.assignment.created questions=%s", len(assignment.questions))
    return ok(assignment.to_dict(), status_code=201)


__all__ = ["teaching_router"]
