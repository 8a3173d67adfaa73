"""
Local (Ollama) tutoring adapter with a fake `ollama` module.

Intent:
    Ensure the adapter builds the client with `host`/`timeout` from config,
    passes JSON mode for auto-grading, accepts dict and attribute replies,
    and classifies client failures as transient.
"""
from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from educa.learning.adapters import local_tutor
from educa.learning.adapters.ports import GradeResult, TutorError, TutorTransientError
from educa.learning.config import AIConfig


class _FakeClient:
    def __init__(self, recorder, reply):
        self._recorder = recorder
        self._reply = reply

    def generate(self, **kwargs):
        self._recorder.calls.append(kwargs)
        if isinstance(self._reply, Exception):
            raise self._reply
        return self._reply


class _Recorder:
    def __init__(self):
        self.calls: list[dict] = []
        self.clients: list[dict] = []


def _install(monkeypatch: pytest.MonkeyPatch, reply) -> _Recorder:
    rec = _Recorder()

    def _ctor(host=None, timeout=None):
        rec.clients.append({"host": host, "timeout": timeout})
        return _FakeClient(rec, reply)

    monkeypatch.setitem(sys.modules, "ollama", SimpleNamespace(Client=_ctor))
    return rec


def _adapter():
    cfg = AIConfig(
        backend="local",
        tutor_adapter_path="educa.learning.adapters.local_tutor",
        tutor_model="llama3.1",
        timeout_tutor_seconds=12,
        ollama_base_url="http://ollama:11434",
    )
    return local_tutor._LocalTutorAdapter(cfg)


def test_tutor_help_uses_configured_host_model_and_system(monkeypatch):
    rec = _install(monkeypatch, {"response": "  Ótima pergunta! 🙂  "})
    text = _adapter().tutor_help(question="O que é fração?", grade="5° Ano", subject="Matemática")
    assert text == "Ótima pergunta! 🙂"
    assert rec.clients == [{"host": "http://ollama:11434", "timeout": 12}]
    call = rec.calls[0]
    assert call["model"] == "llama3.1"
    assert "5° Ano" in call["system"] and "Matemática" in call["system"]
    assert "O que é fração?" in call["prompt"]


def test_attribute_style_and_plain_string_replies(monkeypatch):
    _install(monkeypatch, SimpleNamespace(response="resumo"))
    assert _adapter().lesson_content(topic="Frações", grade="5° Ano", subject="Matemática") == "resumo"
    _install(monkeypatch, "texto")
    assert _adapter().study_models(topic="Frações", grade="5° Ano", subject="Matemática") == "texto"


def test_auto_grade_parses_json(monkeypatch):
    rec = _install(monkeypatch, {"response": '{"grade": 85, "feedback": "Muito bem."}'})
    result = _adapter().auto_grade(question="1/2 + 1/4?", answer="3/4", grade="5° Ano")
    assert result == GradeResult(score=85, feedback="Muito bem.")
    assert rec.calls[0]["format"] == "json"


def test_auto_grade_unparsable_output_is_error(monkeypatch):
    _install(monkeypatch, {"response": "nota: oitenta"})
    with pytest.raises(TutorError):
        _adapter().auto_grade(question="Q", answer="A", grade="5° Ano")


def test_empty_reply_is_error(monkeypatch):
    _install(monkeypatch, {"response": "   "})
    with pytest.raises(TutorError):
        _adapter().assignment_hint(question="Q", grade="5° Ano", subject="Matemática")


@pytest.mark.parametrize("exc", [TimeoutError("slow"), ConnectionError("refused")])
def test_client_failures_are_transient(monkeypatch, exc):
    _install(monkeypatch, exc)
    with pytest.raises(TutorTransientError):
        _adapter().adaptive_recommendations(style="Visual", subject="Matemática", grade="5° Ano")


def test_performance_gaps_prompt_includes_average(monkeypatch):
    rec = _install(monkeypatch, {"response": "Revise frações."})
    _adapter().performance_gaps(subject="Matemática", scores=[40, 60])
    assert "50.0" in rec.calls[0]["prompt"]


def test_build_reads_environment(monkeypatch):
    monkeypatch.setenv("AI_BACKEND", "local")
    monkeypatch.setenv("AI_TUTOR_MODEL", "qwen2.5")
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://localhost:11434")
    rec = _install(monkeypatch, {"response": "ok"})
    local_tutor.build().tutor_help(question="Q", grade="5° Ano", subject="Arte")
    assert rec.calls[0]["model"] == "qwen2.5"
    assert rec.clients[0]["host"] == "http://localhost:11434"
