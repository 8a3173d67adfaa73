"""
Persistent store port: the durable key/value substrate behind the repository.

Intent:
    Keep the contract tiny so the repository and session manager can run on a
    local directory, a Postgres table or plain memory without knowing which.

Contract:
    - `load(key)` returns the decoded value or None when the key is absent or
      its stored text does not parse.
    - `save(key, value)` replaces the value; saving the same value twice leaves
      the same state behind.
    - Implementations raise `StorageUnavailable` for I/O failures. Callers in the
      core catch it, log, and carry on with in-memory state.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol


class StorageUnavailable(Exception):
    """The underlying medium could not be read or written."""


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[Any]: ...

    def save(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


__all__ = ["KeyValueStore", "StorageUnavailable"]
