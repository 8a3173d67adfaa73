"""
Ports for tutoring adapters: result type, protocol and errors.

Intent:
    Keep the contract between the tutoring service and concrete text
    generators (stub, local Ollama) in one framework-agnostic module.

Notes:
    Adapters may raise; the `TutorService` facade is what turns every failure
    into a fixed fallback answer for callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


@dataclass(frozen=True)
class GradeResult:
    """Auto-grading outcome.

    Parameters:
        score: 0..100.
        feedback: One or two sentences of constructive feedback.
    """

    score: int
    feedback: str


class TutorAdapterProtocol(Protocol):
    def tutor_help(self, *, question: str, grade: str, subject: str, context: str = "") -> str: ...

    def auto_grade(self, *, question: str, answer: str, grade: str) -> GradeResult: ...

    def lesson_content(self, *, topic: str, grade: str, subject: str) -> str: ...

    def adaptive_recommendations(self, *, style: str, subject: str, grade: str) -> str: ...

    def performance_gaps(self, *, subject: str, scores: Sequence[float]) -> str: ...

    def study_models(self, *, topic: str, grade: str, subject: str) -> str: ...

    def assignment_hint(self, *, question: str, grade: str, subject: str) -> str: ...


class TutorError(Exception):
    """Base class for tutoring adapter failures."""


class TutorTransientError(TutorError):
    """Recoverable failure (timeout, model host unreachable)."""


__all__ = ["GradeResult", "TutorAdapterProtocol", "TutorError", "TutorTransientError"]
