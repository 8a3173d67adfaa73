"""
TutorService degrades to fixed answers; grade_submission records averages.

Scenarios:
    - Adapter exceptions and blank answers map to the per-operation fallback.
    - Scores are clamped to 0..100.
    - performance_gaps with no scores never calls the adapter.
    - Adapter modules are loaded by dotted path via `build()`.
"""
from __future__ import annotations

import pytest

from educa.learning.adapters.ports import GradeResult, TutorTransientError
from educa.learning.adapters.stub_tutor import StubTutorAdapter
from educa.learning.config import load_ai_config
from educa.learning.models import SubmissionStatus, new_submission
from educa.learning.tutoring import (
    FALLBACK_AUTO_GRADE,
    FALLBACK_GAPS,
    FALLBACK_HINT,
    FALLBACK_LESSON,
    FALLBACK_RECOMMENDATIONS,
    FALLBACK_STUDY_MODELS,
    FALLBACK_TUTOR_HELP,
    TutorService,
    load_tutor_adapter,
)
from educa.teaching.models import new_assignment


class _FailingAdapter:
    def __getattr__(self, name):
        def _raise(**_kwargs):
            raise TutorTransientError("model host unreachable")

        return _raise


class _BlankAdapter:
    def __getattr__(self, name):
        return lambda **_kwargs: "   "


class _ScriptedGrader(StubTutorAdapter):
    def __init__(self, scores):
        self._scores = list(scores)
        self.calls = []

    def auto_grade(self, *, question, answer, grade):
        self.calls.append((question, answer, grade))
        return GradeResult(score=self._scores.pop(0), feedback=f"fb{len(self.calls)}")


def _every_text_operation(service: TutorService):
    return {
        "tutor_help": service.tutor_help("Por que 1/2 > 1/3?", "5° Ano", "Matemática"),
        "lesson_content": service.lesson_content("Frações", "5° Ano", "Matemática"),
        "adaptive_recommendations": service.adaptive_recommendations("Visual", "Matemática", "5° Ano"),
        "performance_gaps": service.performance_gaps("Matemática", [40, 55]),
        "study_models": service.study_models("Frações", "5° Ano", "Matemática"),
        "assignment_hint": service.assignment_hint("Quanto é 1/2 + 1/4?", "5° Ano", "Matemática"),
    }


@pytest.mark.parametrize("adapter", [_FailingAdapter(), _BlankAdapter()])
def test_failures_map_to_fallback_texts(adapter):
    answers = _every_text_operation(TutorService(adapter))
    assert answers == {
        "tutor_help": FALLBACK_TUTOR_HELP,
        "lesson_content": FALLBACK_LESSON,
        "adaptive_recommendations": FALLBACK_RECOMMENDATIONS,
        "performance_gaps": FALLBACK_GAPS,
        "study_models": FALLBACK_STUDY_MODELS,
        "assignment_hint": FALLBACK_HINT,
    }


def test_auto_grade_failure_returns_zero_with_message(caplog):
    with caplog.at_level("WARNING", logger="educa.learning"):
        result = TutorService(_FailingAdapter()).auto_grade("Q", "A", "5° Ano")
    assert result == FALLBACK_AUTO_GRADE
    assert any("learning.tutor.degraded" in r.getMessage() for r in caplog.records)


def test_stub_adapter_answers_pass_through():
    answers = _every_text_operation(TutorService(StubTutorAdapter()))
    assert "Frações" in answers["lesson_content"]
    assert "47.5" in answers["performance_gaps"]
    assert all(text.strip() for text in answers.values())


def test_scores_are_clamped():
    service = TutorService(_ScriptedGrader([140, -5]))
    assert service.auto_grade("Q", "A", "5° Ano").score == 100
    assert service.auto_grade("Q", "A", "5° Ano").score == 0


def test_performance_gaps_without_scores_skips_adapter():
    assert TutorService(_FailingAdapter()).performance_gaps("Matemática", []) == FALLBACK_GAPS


def test_grade_submission_averages_and_records(platform):
    assignment = new_assignment(
        title="Lista", description="", grade="5° Ano", subject="Matemática",
        due_date="2026-12-01", questions=["Q1", "Q2"],
    )
    platform.repo.add_assignment(assignment)
    q1, q2 = assignment.questions
    submission = new_submission(
        assignment_id=assignment.id, student_id="s1", student_name="Ana",
        answers={q1.id: "a1", q2.id: "a2", "stray": "ignored"},
    )
    platform.repo.submit_assignment(submission)
    grader = _ScriptedGrader([80, 61])
    graded = TutorService(grader).grade_submission(platform.repo, submission.id)
    assert graded.status is SubmissionStatus.GRADED
    assert graded.ai_grade == 70  # round-half-even of 70.5
    assert graded.ai_feedback == "fb1 fb2"
    assert [c[0] for c in grader.calls] == ["Q1", "Q2"]
    assert platform.repo.get_submission(submission.id).ai_grade == 70


def test_grade_submission_unknown_ids(platform):
    service = TutorService(StubTutorAdapter())
    assert service.grade_submission(platform.repo, "missing") is None
    orphan = new_submission(assignment_id="gone", student_id="s1", student_name="Ana", answers={"q": "x"})
    platform.repo.submit_assignment(orphan)
    assert service.grade_submission(platform.repo, orphan.id) is None


def test_load_tutor_adapter_defaults_to_stub():
    adapter = load_tutor_adapter(load_ai_config())
    assert isinstance(adapter, StubTutorAdapter)


def test_load_tutor_adapter_honors_dotted_path(monkeypatch):
    monkeypatch.setenv("EDUCA_TUTOR_ADAPTER", "educa.learning.adapters.local_tutor")
    adapter = load_tutor_adapter()
    assert type(adapter).__name__ == "_LocalTutorAdapter"


def test_assess_submission_scores_without_writing(platform):
    assignment = new_assignment(
        title="Lista", description="", grade="5° Ano", subject="Matemática",
        due_date="2026-12-01", questions=["Q1"],
    )
    submission = new_submission(
        assignment_id=assignment.id, student_id="s1", student_name="Ana", answers={"stray": "x"}
    )
    service = TutorService(_ScriptedGrader([90]))
    result = service.assess_submission(submission, assignment)
    assert result == GradeResult(score=0, feedback="Nenhuma resposta corresponde às questões da tarefa.")
    matched = new_submission(
        assignment_id=assignment.id, student_id="s1", student_name="Ana",
        answers={assignment.questions[0].id: "a"},
    )
    assert service.assess_submission(matched, assignment).score == 90
    assert platform.repo.submissions == []
