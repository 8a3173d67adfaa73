"""
Tutoring service: the degrading facade in front of a tutoring adapter.

Intent:
    Callers (web routes, CLI, auto-grading) must never see an AI failure. Each
    operation returns the adapter's text, or a fixed Portuguese fallback when
    the adapter raises or answers with nothing usable.

Auto-grading:
    `assess_submission` scores every answer of a submission against its
    assignment question and averages the scores; `grade_submission` records
    that result through the repository (status GRADED).
"""
from __future__ import annotations

import logging
from importlib import import_module
from typing import Callable, Optional, Sequence, TypeVar

from educa.data.repo import DataRepository
from educa.learning.adapters.ports import GradeResult, TutorAdapterProtocol
from educa.learning.config import AIConfig, load_ai_config
from educa.learning.models import Submission
from educa.teaching.models import Assignment

logger = logging.getLogger("educa.learning")

T = TypeVar("T")

FALLBACK_TUTOR_HELP = "Ocorreu um erro ao consultar o professor virtual. Tente novamente."
FALLBACK_AUTO_GRADE = GradeResult(score=0, feedback="Erro na correção automática.")
FALLBACK_LESSON = "Erro ao gerar conteúdo."
FALLBACK_RECOMMENDATIONS = "Não foi possível carregar recomendações."
FALLBACK_GAPS = "Análise indisponível."
FALLBACK_STUDY_MODELS = "Erro ao conectar com o tutor IA para gerar modelos."
FALLBACK_HINT = "Não foi possível gerar uma dica agora. Tente novamente."

OPERATIONS = frozenset(
    {
        "tutor_help",
        "auto_grade",
        "lesson_content",
        "adaptive_recommendations",
        "performance_gaps",
        "study_models",
        "assignment_hint",
    }
)


def load_tutor_adapter(config: AIConfig | None = None) -> TutorAdapterProtocol:
    """Import the configured adapter module and call its `build()`."""
    cfg = config or load_ai_config()
    module = import_module(cfg.tutor_adapter_path)
    logger.info("learning.tutor.adapter_loaded path=%s", cfg.tutor_adapter_path)
    return module.build()  # type: ignore[attr-defined]


def _clamp_score(value: int) -> int:
    return max(0, min(100, int(value)))


class TutorService:
    def __init__(self, adapter: TutorAdapterProtocol) -> None:
        self._adapter = adapter

    def _call(self, operation: str, fn: Callable[[], T], fallback: T) -> T:
        try:
            result = fn()
        except Exception as exc:
            logger.warning("learning.tutor.degraded operation=%s reason=%s", operation, exc.__class__.__name__)
            return fallback
        if isinstance(result, str) and not result.strip():
            logger.warning("learning.tutor.degraded operation=%s reason=empty", operation)
            return fallback
        return result

    def tutor_help(self, question: str, grade: str, subject: str, context: str = "") -> str:
        return self._call(
            "tutor_help",
            lambda: self._adapter.tutor_help(question=question, grade=grade, subject=subject, context=context),
            FALLBACK_TUTOR_HELP,
        )

    def auto_grade(self, question: str, answer: str, grade: str) -> GradeResult:
        result = self._call(
            "auto_grade",
            lambda: self._adapter.auto_grade(question=question, answer=answer, grade=grade),
            FALLBACK_AUTO_GRADE,
        )
        return GradeResult(score=_clamp_score(result.score), feedback=result.feedback)

    def lesson_content(self, topic: str, grade: str, subject: str) -> str:
        return self._call(
            "lesson_content",
            lambda: self._adapter.lesson_content(topic=topic, grade=grade, subject=subject),
            FALLBACK_LESSON,
        )

    def adaptive_recommendations(self, style: str, subject: str, grade: str) -> str:
        return self._call(
            "adaptive_recommendations",
            lambda: self._adapter.adaptive_recommendations(style=style, subject=subject, grade=grade),
            FALLBACK_RECOMMENDATIONS,
        )

    def performance_gaps(self, subject: str, scores: Sequence[float]) -> str:
        if not scores:
            return FALLBACK_GAPS
        return self._call(
            "performance_gaps",
            lambda: self._adapter.performance_gaps(subject=subject, scores=list(scores)),
            FALLBACK_GAPS,
        )

    def study_models(self, topic: str, grade: str, subject: str) -> str:
        return self._call(
            "study_models",
            lambda: self._adapter.study_models(topic=topic, grade=grade, subject=subject),
            FALLBACK_STUDY_MODELS,
        )

    def assignment_hint(self, question: str, grade: str, subject: str) -> str:
        return self._call(
            "assignment_hint",
            lambda: self._adapter.assignment_hint(question=question, grade=grade, subject=subject),
            FALLBACK_HINT,
        )

    def assess_submission(self, submission: Submission, assignment: Assignment) -> GradeResult:
        """Score every answer against its question and average the results.

        Answers to questions the assignment does not contain are ignored; an
        attempt without any matching answer scores 0. Nothing is written.
        """
        results: list[GradeResult] = []
        for answer in submission.answers:
            question = assignment.question(answer.question_id)
            if question is None:
                continue
            results.append(self.auto_grade(question.text, answer.text, assignment.grade.value))
        if not results:
            return GradeResult(score=0, feedback="Nenhuma resposta corresponde às questões da tarefa.")
        score = round(sum(r.score for r in results) / len(results))
        feedback = " ".join(r.feedback.strip() for r in results if r.feedback.strip())
        return GradeResult(score=score, feedback=feedback)

    def grade_submission(self, repo: DataRepository, submission_id: str) -> Optional[Submission]:
        """Auto-grade a stored submission and record the result.

        Returns None when the submission or its assignment is unknown.
        """
        submission = repo.get_submission(submission_id)
        if submission is None:
            return None
        assignment = repo.get_assignment(submission.assignment_id)
        if assignment is None:
            return None
        result = self.assess_submission(submission, assignment)
        return repo.record_grade(submission_id, ai_grade=result.score, ai_feedback=result.feedback)


__all__ = [
    "TutorService",
    "load_tutor_adapter",
    "OPERATIONS",
    "FALLBACK_TUTOR_HELP",
    "FALLBACK_AUTO_GRADE",
    "FALLBACK_LESSON",
    "FALLBACK_RECOMMENDATIONS",
    "FALLBACK_GAPS",
    "FALLBACK_STUDY_MODELS",
    "FALLBACK_HINT",
]
