"""
Pytest configuration for the educa test suite.

Why: Force AnyIO to use the asyncio backend, keep the repository root on
sys.path, and give every test a fresh in-memory platform with the
deterministic tutor so no test touches disk, Postgres or Ollama by accident.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from educa.bootstrap import Platform, start  # noqa: E402
from educa.identity_access.domain import new_student, new_teacher  # noqa: E402
from educa.learning.adapters.stub_tutor import StubTutorAdapter  # noqa: E402
from educa.learning.tutoring import TutorService  # noqa: E402
from educa.storage.stores import MemoryStore  # noqa: E402

_ENV_VARS = (
    "EDUCA_ENV",
    "EDUCA_STORE",
    "EDUCA_DATA_DIR",
    "EDUCA_STORE_TABLE",
    "DATABASE_URL",
    "AI_BACKEND",
    "EDUCA_TUTOR_ADAPTER",
    "AI_TUTOR_MODEL",
    "AI_TIMEOUT_TUTOR",
    "OLLAMA_BASE_URL",
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def platform(memory_store: MemoryStore) -> Platform:
    return start(memory_store, tutor=TutorService(StubTutorAdapter()))


@pytest.fixture
def student():
    return new_student(name="Ana Souza", email="ana@escola.br", grade="5° Ano", learning_style="Visual")


@pytest.fixture
def teacher():
    return new_teacher(
        name="Carlos Lima",
        email="carlos@escola.br",
        teaching_grades=["5° Ano"],
        teaching_subjects=["Matemática"],
    )
