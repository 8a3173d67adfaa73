"""Learning records: a student's answers to one assignment."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from educa.identity_access.domain import new_id


class SubmissionStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"


@dataclass(frozen=True)
class Answer:
    question_id: str
    text: str


@dataclass(frozen=True)
class Submission:
    id: str
    assignment_id: str
    student_id: str
    student_name: str
    answers: Tuple[Answer, ...] = ()
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    ai_feedback: Optional[str] = None
    ai_grade: Optional[int] = None  # 0..100
    teacher_grade: Optional[int] = None

    def graded(
        self,
        *,
        ai_grade: Optional[int] = None,
        ai_feedback: Optional[str] = None,
        teacher_grade: Optional[int] = None,
    ) -> "Submission":
        """Return a copy marked GRADED; unset arguments keep existing values."""
        return replace(
            self,
            status=SubmissionStatus.GRADED,
            ai_grade=self.ai_grade if ai_grade is None else ai_grade,
            ai_feedback=self.ai_feedback if ai_feedback is None else ai_feedback,
            teacher_grade=self.teacher_grade if teacher_grade is None else teacher_grade,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "assignmentId": self.assignment_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "answers": [{"questionId": a.question_id, "text": a.text} for a in self.answers],
            "status": self.status.value,
        }
        if self.ai_feedback is not None:
            data["aiFeedback"] = self.ai_feedback
        if self.ai_grade is not None:
            data["aiGrade"] = self.ai_grade
        if self.teacher_grade is not None:
            data["teacherGrade"] = self.teacher_grade
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Submission":
        ai_grade = data.get("aiGrade")
        teacher_grade = data.get("teacherGrade")
        return cls(
            id=str(data["id"]),
            assignment_id=str(data["assignmentId"]),
            student_id=str(data["studentId"]),
            student_name=str(data.get("studentName") or ""),
            answers=tuple(
                Answer(question_id=str(a["questionId"]), text=str(a.get("text") or ""))
                for a in data.get("answers") or ()
            ),
            status=SubmissionStatus(data.get("status") or SubmissionStatus.SUBMITTED),
            ai_feedback=data.get("aiFeedback"),
            ai_grade=int(ai_grade) if ai_grade is not None else None,
            teacher_grade=int(teacher_grade) if teacher_grade is not None else None,
        )


def new_submission(
    *,
    assignment_id: str,
    student_id: str,
    student_name: str,
    answers: Mapping[str, str],
) -> Submission:
    """Build a submission from a {question_id: text} mapping, keeping its order."""
    return Submission(
        id=new_id(),
        assignment_id=assignment_id,
        student_id=student_id,
        student_name=student_name,
        answers=tuple(Answer(question_id=qid, text=text) for qid, text in answers.items()),
    )


__all__ = ["SubmissionStatus", "Answer", "Submission", "new_submission"]
