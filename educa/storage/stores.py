"""
Local key/value stores: MemoryStore (tests, throwaway runs) and FileStore.

Why: The platform is single-tenant and runs on one machine, so a directory
of small JSON documents is enough durability. Both stores keep the encoded
text rather than live objects, which makes "save then load" behave the same
in tests as on disk.

Layout (FileStore): `<data_dir>/<key>.json`, one document per key. Writes go
to a temporary sibling file first and are swapped in with `os.replace`, so a
crash mid-write leaves the previous value intact.
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import unicodedata
from pathlib import Path
from typing import Any, Dict, Optional

from educa.storage.keys import ALL_KEYS
from educa.storage.ports import StorageUnavailable

_log = logging.getLogger("educa.storage")

_KEY_RE = re.compile(r"[^A-Za-z0-9._-]+")


def encode_value(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def decode_value(key: str, raw: Optional[str]) -> Optional[Any]:
    """Decode stored text; corrupt text counts as absent."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        _log.warning("storage.corrupt_value key=%s", key)
        return None


def _sanitize_key(key: str) -> str:
    normalized = unicodedata.normalize("NFKD", key or "")
    ascii_key = normalized.encode("ascii", "ignore").decode("ascii")
    sanitized = _KEY_RE.sub("-", ascii_key).strip("-_.")
    if not sanitized:
        raise ValueError("invalid storage key")
    return sanitized


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        # Values are kept as encoded text; `initial` takes raw text so tests
        # can seed corrupt documents.
        self._data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[Any]:
        return decode_value(key, self._data.get(key))

    def save(self, key: str, value: Any) -> None:
        self._data[key] = encode_value(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def raw(self, key: str) -> Optional[str]:
        return self._data.get(key)


class FileStore:
    """Directory-backed store with one JSON file per key.

    Parameters
    ----------
    data_dir:
        Directory holding the documents. Created on first write. It may be
        shared; `clear` only removes the platform's own keys.
    """

    SUFFIX = ".json"

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self._dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{_sanitize_key(key)}{self.SUFFIX}"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            _log.warning("storage.corrupt_value key=%s", key)
            return None
        except OSError as exc:
            raise StorageUnavailable(f"read failed for {key}: {exc.__class__.__name__}") from exc
        return decode_value(key, raw)

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        payload = encode_value(value)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".tmp", dir=self._dir)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageUnavailable(f"write failed for {key}: {exc.__class__.__name__}") from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"delete failed for {key}: {exc.__class__.__name__}") from exc

    def clear(self) -> None:
        """Remove the platform's documents; other files in the directory stay."""
        try:
            for key in ALL_KEYS:
                self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"clear failed: {exc.__class__.__name__}") from exc


__all__ = ["MemoryStore", "FileStore", "encode_value", "decode_value"]
