"""
Local tutoring adapter backed by an Ollama model.

Intent:
    Generate tutoring text (explanations, lesson summaries, hints) and short
    auto-grading verdicts with a model served by a local Ollama host.

Behavior:
    - Model, host and timeout come from `load_ai_config()`.
    - Client timeouts map to `TutorTransientError`; unusable replies (empty
      text, grading output that is not JSON) raise `TutorError`.

Privacy:
    Do not log prompts or student answers; only operation names and sizes.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from educa.learning.adapters.ports import GradeResult, TutorError, TutorTransientError
from educa.learning.config import AIConfig, load_ai_config

logger = logging.getLogger(__name__)

_TUTOR_SYSTEM = (
    "Você é um professor particular amigável e encorajador para um aluno do {grade}. "
    "A matéria é {subject}. Sua resposta deve ser didática, adequada à idade do aluno, "
    "e usar emojis para tornar o aprendizado divertido. Se o aluno tiver dificuldades, "
    "ofereça exemplos práticos. Responda em português do Brasil."
)


class _LocalTutorAdapter:
    def __init__(self, config: AIConfig | None = None) -> None:
        cfg = config or load_ai_config()
        self._model = cfg.tutor_model
        self._base_url = cfg.ollama_base_url
        self._timeout = cfg.timeout_tutor_seconds

    def _generate(self, operation: str, prompt: str, *, system: str | None = None, json_mode: bool = False) -> str:
        # Import lazily so tests can install a fake `ollama` module.
        try:
            import ollama  # type: ignore
        except Exception as exc:  # pragma: no cover - dependency missing
            raise TutorTransientError(f"ollama client unavailable: {exc}") from exc

        kwargs: dict[str, Any] = {"model": self._model, "prompt": prompt}
        if system:
            kwargs["system"] = system
        if json_mode:
            kwargs["format"] = "json"
        try:
            client = ollama.Client(host=self._base_url, timeout=self._timeout)
            raw = client.generate(**kwargs)
        except TimeoutError as exc:
            logger.warning("learning.tutor.timeout operation=%s", operation)
            raise TutorTransientError(str(exc)) from exc
        except Exception as exc:
            logger.warning("learning.tutor.client_error operation=%s reason=%s", operation, exc.__class__.__name__)
            raise TutorTransientError(str(exc)) from exc

        if isinstance(raw, str):
            text = raw
        else:
            try:
                text = raw["response"]
            except (KeyError, TypeError):
                text = getattr(raw, "response", "")
        text = str(text or "").strip()
        if not text:
            raise TutorError(f"empty response for {operation}")
        logger.info("learning.tutor.completed operation=%s chars=%s", operation, len(text))
        return text

    def tutor_help(self, *, question: str, grade: str, subject: str, context: str = "") -> str:
        return self._generate(
            "tutor_help",
            f"Contexto: {context}\n\nPergunta do aluno: {question}",
            system=_TUTOR_SYSTEM.format(grade=grade, subject=subject),
        )

    def auto_grade(self, *, question: str, answer: str, grade: str) -> GradeResult:
        prompt = (
            f"Aja como um professor corrigindo uma prova de um aluno do {grade}.\n"
            f'Pergunta: "{question}"\n'
            f'Resposta do Aluno: "{answer}"\n\n'
            "Avalie a resposta de 0 a 100 baseando-se na precisão e clareza. "
            "Forneça um feedback construtivo curto (máximo 2 frases). "
            'Retorne APENAS JSON no formato {"grade": <inteiro>, "feedback": "<texto>"}.'
        )
        text = self._generate("auto_grade", prompt, json_mode=True)
        try:
            data = json.loads(text)
            return GradeResult(score=int(data["grade"]), feedback=str(data.get("feedback") or ""))
        except (ValueError, KeyError, TypeError) as exc:
            raise TutorError("auto_grade returned unparsable output") from exc

    def lesson_content(self, *, topic: str, grade: str, subject: str) -> str:
        return self._generate(
            "lesson_content",
            f'Crie um resumo de aula introdutório sobre "{topic}" para alunos do {grade} na matéria de '
            f"{subject}. Inclua 3 pontos principais e uma curiosidade. Use formatação Markdown.",
        )

    def adaptive_recommendations(self, *, style: str, subject: str, grade: str) -> str:
        return self._generate(
            "adaptive_recommendations",
            f"Sugira 3 atividades ou tipos de conteúdo para um aluno do {grade} estudar {subject}. "
            f"O aluno tem estilo de aprendizado {style}. Para visual: diagramas, vídeos, mapas mentais. "
            "Para auditivo: podcasts, explicar em voz alta. Para cinestésico: experimentos, montar coisas. "
            "Formate como uma lista markdown curta.",
        )

    def performance_gaps(self, *, subject: str, scores: Sequence[float]) -> str:
        average = sum(scores) / len(scores)
        joined = ", ".join(f"{s:g}" for s in scores)
        return self._generate(
            "performance_gaps",
            f"Analise o desempenho de um aluno em {subject}. Notas recentes: [{joined}]. Média: {average:.1f}. "
            "Identifique potenciais lacunas e sugira uma estratégia de recuperação em 2 frases.",
        )

    def study_models(self, *, topic: str, grade: str, subject: str) -> str:
        return self._generate(
            "study_models",
            f"Atue como um especialista em educação. Para um aluno do {grade} estudando {subject}, "
            f'crie 3 modelos de estudo diferentes e criativos para o tópico "{topic}". '
            "Estruture a resposta como três blocos: '🏁 **Modelo 1: [Nome]**', '🧩 **Modelo 2: [Nome]**' "
            "e '🎨 **Modelo 3: [Nome]**', cada um com uma descrição curta de como fazer. "
            "Seja didático, direto e motivador.",
        )

    def assignment_hint(self, *, question: str, grade: str, subject: str) -> str:
        return self._generate(
            "assignment_hint",
            f"Um aluno do {grade} está resolvendo uma tarefa de {subject}. Pergunta: \"{question}\". "
            "Dê uma dica curta que ajude a pensar na resposta sem entregá-la.",
            system=_TUTOR_SYSTEM.format(grade=grade, subject=subject),
        )


def build() -> _LocalTutorAdapter:
    """Factory used by the tutoring service to construct the adapter instance."""
    return _LocalTutorAdapter()
