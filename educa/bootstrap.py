"""
Process startup and last-resort recovery.

Startup happens in two explicit phases:

1. Hydrate every collection from the store (`DataRepository.hydrate`).
2. Only then restore the persisted session (`SessionManager.restore`).

The resulting `Platform` is built once per process and handed to each
consumer (web app, CLI command). Nothing here is a module-level singleton.

Recovery:
    `reset_all` wipes every persisted key and starts over from the seed state.
    It backs the "clear data and reload" escape hatch offered when the
    application hits an unexpected error.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from educa.data.repo import DataRepository
from educa.identity_access.approvals import AccountAdministration
from educa.identity_access.sessions import SessionManager
from educa.learning.tutoring import TutorService, load_tutor_adapter
from educa.storage.config import build_store
from educa.storage.ports import KeyValueStore, StorageUnavailable

logger = logging.getLogger("educa.bootstrap")


def _should_load_dotenv() -> bool:
    """Load `.env` outside pytest unless EDUCA_ENABLE_DOTENV opts out."""
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("EDUCA_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


def load_environment() -> None:
    if _should_load_dotenv():
        load_dotenv()


@dataclass
class Platform:
    store: KeyValueStore
    repo: DataRepository
    sessions: SessionManager
    admin: AccountAdministration
    tutor: TutorService


def start(store: Optional[KeyValueStore] = None, *, tutor: Optional[TutorService] = None) -> Platform:
    """Build the platform: hydrate first, then restore the session."""
    store = store if store is not None else build_store()
    repo = DataRepository.hydrate(store)
    sessions = SessionManager(repo)
    restored = sessions.restore()
    logger.info("bootstrap.started session_restored=%s", restored is not None)
    return Platform(
        store=store,
        repo=repo,
        sessions=sessions,
        admin=AccountAdministration(repo),
        tutor=tutor if tutor is not None else TutorService(load_tutor_adapter()),
    )


def reset_all(platform: Platform) -> Platform:
    """Clear all persisted state and start again from the seeded defaults."""
    try:
        platform.store.clear()
    except StorageUnavailable as exc:
        logger.error("bootstrap.reset_failed reason=%s", exc)
    logger.warning("bootstrap.reset_all")
    return start(platform.store, tutor=platform.tutor)


__all__ = ["Platform", "start", "reset_all", "load_environment"]
