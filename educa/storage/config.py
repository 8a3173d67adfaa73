"""
Storage backend selection from environment variables.

Behavior:
    - `EDUCA_STORE` picks the backend: "file" (default), "memory" or "db".
    - `EDUCA_DATA_DIR` sets the FileStore directory (default `./.educa`).
    - `DATABASE_URL` / `EDUCA_STORE_TABLE` configure the DBStore.

Permissions:
    Pure configuration; only `build_store()` touches the filesystem or network
    (and only for the db backend, to create the table).
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from educa.storage.ports import KeyValueStore
from educa.storage.stores import FileStore, MemoryStore

STORE_BACKENDS = frozenset({"file", "memory", "db"})
DATA_DIR_DEFAULT = ".educa"
STORE_TABLE_DEFAULT = "public.educa_kv"


@dataclass(frozen=True)
class StorageConfig:
    backend: str
    data_dir: str
    dsn: str
    table: str


def load_storage_config() -> StorageConfig:
    backend = (os.getenv("EDUCA_STORE") or "file").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"EDUCA_STORE must be one of {sorted(STORE_BACKENDS)}, got: {backend!r}")
    data_dir = (os.getenv("EDUCA_DATA_DIR") or DATA_DIR_DEFAULT).strip()
    dsn = (os.getenv("DATABASE_URL") or "").strip()
    table = (os.getenv("EDUCA_STORE_TABLE") or STORE_TABLE_DEFAULT).strip()
    if backend == "db" and not dsn:
        raise ValueError("EDUCA_STORE=db requires DATABASE_URL")
    return StorageConfig(backend=backend, data_dir=data_dir, dsn=dsn, table=table)


def build_store(cfg: StorageConfig | None = None) -> KeyValueStore:
    """Construct the configured store."""
    cfg = cfg or load_storage_config()
    if cfg.backend == "memory":
        return MemoryStore()
    if cfg.backend == "db":
        from educa.storage.stores_db import DBStore

        store = DBStore(cfg.dsn, table=cfg.table)
        store.ensure_table()
        return store
    return FileStore(cfg.data_dir)


__all__ = ["StorageConfig", "load_storage_config", "build_store", "STORE_BACKENDS"]
