"""
Deterministic tutoring adapter for local development and tests.

Behavior:
    - Text operations echo their inputs into a fixed Markdown template.
    - Auto-grading gives 0 to blank answers and 70 to anything else.
"""

from __future__ import annotations

from typing import Sequence

from educa.learning.adapters.ports import GradeResult


class StubTutorAdapter:
    def tutor_help(self, *, question: str, grade: str, subject: str, context: str = "") -> str:
        return f"**{subject} ({grade})**\n\nVamos pensar juntos: {question.strip()}"

    def auto_grade(self, *, question: str, answer: str, grade: str) -> GradeResult:
        if not answer.strip():
            return GradeResult(score=0, feedback="Resposta em branco.")
        return GradeResult(score=70, feedback="Boa tentativa. Revise os detalhes da pergunta.")

    def lesson_content(self, *, topic: str, grade: str, subject: str) -> str:
        return (
            f"# {topic}\n\n"
            f"Resumo introdutório de {subject} para o {grade}.\n\n"
            "1. Ponto principal\n2. Ponto principal\n3. Ponto principal\n\n"
            "_Curiosidade:_ modo de demonstração."
        )

    def adaptive_recommendations(self, *, style: str, subject: str, grade: str) -> str:
        return f"- Atividade de {subject} para estilo {style}\n- Revisão guiada\n- Exercício prático"

    def performance_gaps(self, *, subject: str, scores: Sequence[float]) -> str:
        average = sum(scores) / len(scores)
        return f"Média em {subject}: {average:.1f}. Reforce os tópicos com notas abaixo da média."

    def study_models(self, *, topic: str, grade: str, subject: str) -> str:
        return (
            f"🏁 **Modelo 1: Resumo**\nResuma {topic} com suas palavras.\n\n"
            f"🧩 **Modelo 2: Perguntas**\nCrie perguntas sobre {topic}.\n\n"
            f"🎨 **Modelo 3: Mapa mental**\nDesenhe um mapa de {topic}."
        )

    def assignment_hint(self, *, question: str, grade: str, subject: str) -> str:
        return "Releia a pergunta e destaque as palavras-chave antes de responder."


def build() -> StubTutorAdapter:
    """Factory used by the tutoring service to instantiate the adapter."""
    return StubTutorAdapter()
