"""Key-value stores for persisted completion records."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal string key-value store used by the progress tracker."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStore:
    """In-process store, mainly for tests and previews."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


def _key_to_hash(key: str) -> str:
    """Generate a file-safe hash from a store key."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class JsonFileStore:
    """
    Store with one JSON file per key.

    Structure: {root}/{key_hash}.json containing
    {"key": ..., "value": ..., "updated_at": ...}

    Writes replace the whole file; concurrent writers are not coordinated
    and the last write wins.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{_key_to_hash(key)}.json"

    def _read(self, path: Path) -> dict | None:
        try:
            with open(path) as f:
                record = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read store record {path}: {e}")
            return None
        if not isinstance(record, dict) or "key" not in record:
            logger.warning(f"Ignoring malformed store record {path}")
            return None
        return record

    def get(self, key: str) -> str | None:
        record = self._read(self._path(key))
        if record is None or record["key"] != key:
            return None
        return record.get("value")

    def set(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        record = {
            "key": key,
            "value": value,
            "updated_at": datetime.now().isoformat(),
        }
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(record, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def keys(self) -> list[str]:
        if not self.root.exists():
            return []
        keys = []
        for path in sorted(self.root.glob("*.json")):
            record = self._read(path)
            if record is not None:
                keys.append(record["key"])
        return keys

    def updated_at(self, key: str) -> datetime | None:
        """Last write time of a key, from the record or the file mtime."""
        path = self._path(key)
        record = self._read(path)
        if record is None:
            return None
        try:
            return datetime.fromisoformat(record["updated_at"])
        except (KeyError, TypeError, ValueError):
            return datetime.fromtimestamp(path.stat().st_mtime)
