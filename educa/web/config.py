"""
Startup safety checks for the web surface.

Why: A classroom deployment must not silently run on throwaway state or on the
demo tutor. Development stays permissive; production-like environments fail
fast with `SystemExit`.
"""
from __future__ import annotations

import os

from educa.learning.config import is_prod_like


def ensure_secure_config_on_startup() -> None:
    """Refuse to start on obviously unsafe production configuration.

    Checks:
    - EDUCA_STORE must not be `memory` (state would vanish on restart).
    - AI_BACKEND must not be `stub`.
    - DATABASE_URL must not disable TLS when the db store is used.
    """
    if not is_prod_like():
        return

    store = (os.getenv("EDUCA_STORE") or "file").strip().lower()
    if store == "memory":
        raise SystemExit("Refusing to start: EDUCA_STORE=memory is not allowed in production/staging.")

    ai_backend = (os.getenv("AI_BACKEND") or "stub").strip().lower()
    if ai_backend == "stub":
        raise SystemExit(
            "Refusing to start: AI_BACKEND=stub is not allowed in production/staging. Configure a real adapter."
        )

    if store == "db" and "sslmode=disable" in os.getenv("DATABASE_URL", ""):
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require."
        )
