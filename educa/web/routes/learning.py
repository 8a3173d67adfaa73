"""
Learning routes: submissions, grading and the AI tutor.

Why:
    Students answer assignments; teachers grade them, either by hand or by
    asking the tutor to auto-grade. The tutor endpoints never fail because of
    the AI backend: `TutorService` answers with a fallback text instead.

Permissions:
    - Submitting requires a student session.
    - Listing: students see their own attempts, teachers and admins see all
      (optionally for one assignment).
    - Grading requires an approved teacher.
    - Tutor operations require any authorized session.
"""
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from educa.identity_access.domain import Role, Student
from educa.learning.models import new_submission
from educa.learning.tutoring import OPERATIONS
from educa.web.guards import error, ok, platform_of, require_role

learning_router = APIRouter(tags=["Learning"])
logger = logging.getLogger("educa.web.learning")


class SubmissionCreate(BaseModel):
    answers: dict[str, str] = Field(..., min_length=1)


class GradePayload(BaseModel):
    teacher_grade: Optional[int] = Field(default=None, ge=0, le=100)


class TutorRequest(BaseModel):
    question: Optional[str] = Field(default=None, max_length=4000)
    answer: Optional[str] = Field(default=None, max_length=8000)
    context: str = Field(default="", max_length=4000)
    topic: Optional[str] = Field(default=None, max_length=500)
    grade: Optional[str] = None
    subject: Optional[str] = None
    style: Optional[str] = None
    scores: list[float] = Field(default_factory=list)


# Fields each operation needs after defaults from the session user are applied.
_REQUIRED = {
    "tutor_help": ("question", "grade", "subject"),
    "auto_grade": ("question", "answer", "grade"),
    "lesson_content": ("topic", "grade", "subject"),
    "adaptive_recommendations": ("style", "subject", "grade"),
    "performance_gaps": ("subject",),
    "study_models": ("topic", "grade", "subject"),
    "assignment_hint": ("question", "grade", "subject"),
}


@learning_router.post("/api/assignments/{assignment_id}/submissions")
async def submit(request: Request, assignment_id: str, payload: SubmissionCreate):
    """Submit answers for an assignment (student only).

    Behavior:
        - 201 with the stored submission. Earlier attempts are kept.
        - 400 when an answer refers to a question the assignment lacks.
        - 404 when the assignment is unknown.
    """
    user, err = require_role(request, Role.STUDENT)
    if err:
        return err
    repo = platform_of(request).repo
    assignment = repo.get_assignment(assignment_id)
    if assignment is None:
        return error(404, "not_found")
    if any(assignment.question(qid) is None for qid in payload.answers):
        return error(400, "bad_request", "unknown_question")
    submission = new_submission(
        assignment_id=assignment.id,
        student_id=user.id,
        student_name=user.name,
        answers=payload.answers,
    )
    repo.submit_assignment(submission)
    logger.info("learning.submission.created answers=%s", len(submission.answers))
    return ok(submission.to_dict(), status_code=201)


@learning_router.get("/api/submissions")
async def list_submissions(request: Request, assignment_id: Optional[str] = None):
    user, err = require_role(request)
    if err:
        return err
    repo = platform_of(request).repo
    if isinstance(user, Student):
        items = repo.submissions_by_student(user.id)
        if assignment_id:
            items = [s for s in items if s.assignment_id == assignment_id]
    elif assignment_id:
        items = repo.submissions_for_assignment(assignment_id)
    else:
        items = repo.submissions
    return ok([s.to_dict() for s in items])


@learning_router.post("/api/submissions/{submission_id}/grade")
async def grade(request: Request, submission_id: str, payload: Optional[GradePayload] = None):
    """Grade a submission.

    With `teacher_grade` the teacher's score is recorded as is; without it the
    tutor auto-grades every answer and records the averaged AI grade. The
    tutor runs in a worker thread; the grade is recorded on the event loop.
    """
    _, err = require_role(request, Role.TEACHER)
    if err:
        return err
    platform = platform_of(request)
    repo = platform.repo
    if payload is not None and payload.teacher_grade is not None:
        updated = repo.record_grade(submission_id, teacher_grade=payload.teacher_grade)
    else:
        submission = repo.get_submission(submission_id)
        assignment = repo.get_assignment(submission.assignment_id) if submission else None
        if submission is None or assignment is None:
            return error(404, "not_found")
        result = await asyncio.to_thread(platform.tutor.assess_submission, submission, assignment)
        updated = repo.record_grade(submission_id, ai_grade=result.score, ai_feedback=result.feedback)
    if updated is None:
        return error(404, "not_found")
    return ok(updated.to_dict())


@learning_router.post("/api/tutor/{operation}")
async def tutor(request: Request, operation: str, payload: TutorRequest):
    """Run one tutoring operation.

    Students get their grade and learning style filled in when omitted.
    Responses are `{"text": ...}`, or `{"score", "feedback"}` for auto_grade.
    Adapter calls block on the model backend, so they run in a worker thread.
    """
    user, err = require_role(request)
    if err:
        return err
    if operation not in OPERATIONS:
        return error(404, "not_found", "unknown_operation")
    fields = payload.model_dump()
    if isinstance(user, Student):
        if not fields["grade"] and user.grade is not None:
            fields["grade"] = user.grade.value
        if not fields["style"] and user.learning_style is not None:
            fields["style"] = user.learning_style.value
    missing = [name for name in _REQUIRED[operation] if not fields.get(name)]
    if missing:
        return error(400, "bad_request", "missing:" + ",".join(missing))

    service = platform_of(request).tutor
    f = fields
    if operation == "auto_grade":
        result = await asyncio.to_thread(service.auto_grade, f["question"], f["answer"], f["grade"])
        return ok({"score": result.score, "feedback": result.feedback})
    if operation == "tutor_help":
        call = partial(service.tutor_help, f["question"], f["grade"], f["subject"], f["context"])
    elif operation == "lesson_content":
        call = partial(service.lesson_content, f["topic"], f["grade"], f["subject"])
    elif operation == "adaptive_recommendations":
        call = partial(service.adaptive_recommendations, f["style"], f["subject"], f["grade"])
    elif operation == "performance_gaps":
        call = partial(service.performance_gaps, f["subject"], f["scores"])
    elif operation == "study_models":
        call = partial(service.study_models, f["topic"], f["grade"], f["subject"])
    else:
        call = partial(service.assignment_hint, f["question"], f["grade"], f["subject"])
    text = await asyncio.to_thread(call)
    return ok({"text": text})


__all__ = ["learning_router"]
