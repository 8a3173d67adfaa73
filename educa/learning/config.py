"""
AI configuration for the tutoring service.

Intent:
    Provide a single place to read environment variables that control adapter
    selection, the model name, the timeout and the local Ollama URL.

Behavior:
    - `AI_BACKEND` selects "stub" or "local" (default: stub).
    - `EDUCA_TUTOR_ADAPTER` (dotted module path) takes precedence over the alias.
    - Timeouts must be 1..300 seconds; the Ollama URL must point to localhost or
      a compose service name.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from urllib.parse import urlparse

STUB_ADAPTER = "educa.learning.adapters.stub_tutor"
LOCAL_ADAPTER = "educa.learning.adapters.local_tutor"


@dataclass(frozen=True)
class AIConfig:
    backend: str  # "stub" | "local"
    tutor_adapter_path: str
    tutor_model: str
    timeout_tutor_seconds: int
    ollama_base_url: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value <= 0 or value > 300:
        raise ValueError(f"{name} out of range (1..300), got: {value}")
    return value


_HOST_RE = re.compile(r"^[a-z0-9._-]+$")


def _validate_ollama_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError("OLLAMA_BASE_URL must start with http:// or https://")
    host = (parsed.hostname or "").lower()
    if host == "localhost" or host.startswith("127.") or host == "::1":
        return
    # docker compose service names carry no dots
    if "." not in host and _HOST_RE.match(host):
        return
    raise ValueError("OLLAMA_BASE_URL must point to localhost or a service hostname without dots")


def is_prod_like() -> bool:
    env = (os.getenv("EDUCA_ENV") or "dev").lower()
    return env in {"prod", "production", "stage", "staging"}


def load_ai_config() -> AIConfig:
    """Parse and validate AI-related configuration from environment variables."""
    backend = (os.getenv("AI_BACKEND") or "stub").strip().lower()
    if backend not in {"stub", "local"}:
        raise ValueError("AI_BACKEND must be 'stub' or 'local'")

    default_adapter = LOCAL_ADAPTER if backend == "local" else STUB_ADAPTER
    adapter_path = (os.getenv("EDUCA_TUTOR_ADAPTER") or default_adapter).strip()

    model = (os.getenv("AI_TUTOR_MODEL") or "llama3.1").strip()
    timeout = _int_env("AI_TIMEOUT_TUTOR", 30)

    ollama_url = os.getenv("OLLAMA_BASE_URL", "http://ollama:11434")
    _validate_ollama_url(ollama_url)

    return AIConfig(
        backend=backend,
        tutor_adapter_path=adapter_path,
        tutor_model=model,
        timeout_tutor_seconds=timeout,
        ollama_base_url=ollama_url,
    )


__all__ = ["AIConfig", "load_ai_config", "is_prod_like", "STUB_ADAPTER", "LOCAL_ADAPTER"]
