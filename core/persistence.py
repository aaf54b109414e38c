"""
Key/value blob persistence for the order history.

The order history is stored as one serialized blob under a fixed key. The
history store only ever needs three operations, so the backend is hidden
behind the small PersistenceAdapter interface:

    get(key)        -> Optional[str]
    set(key, blob)  -> None
    remove(key)     -> None

Backends:
    - InMemoryPersistence: process-lifetime dict, used by tests and the
      testing config
    - JsonFilePersistence: one JSON object on disk mapping key -> blob

Usage:
    persistence = JsonFilePersistence(Path("data/order_history.json"))
    persistence.set("orderHistory", "[]")
    blob = persistence.get("orderHistory")
"""

from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from core.exceptions import PersistenceError
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class PersistenceAdapter(ABC):
    """Minimal key/value blob store interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key``, or None if absent."""

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        """Store ``blob`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""


class InMemoryPersistence(PersistenceAdapter):
    """
    Dictionary-backed store.

    Keeps a write counter so tests can assert how many times the history
    was persisted.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob
            self.write_count += 1

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
            self.write_count += 1


class JsonFilePersistence(PersistenceAdapter):
    """
    File-backed store: a single JSON object of key -> blob.

    Writes go to a sibling temporary file which then replaces the real file,
    so a crash mid-write leaves the previous contents intact. An unreadable
    or corrupt file is treated as empty on read.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path) if isinstance(path, str) else path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = blob
            self._write_all(data, operation="set", key=key)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key not in data:
                return
            del data[key]
            self._write_all(data, operation="remove", key=key)

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self._path}: top level is not an object")
            return {}
        return data

    def _write_all(self, data: Dict[str, str], operation: str, key: str) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceError(operation, key, str(e)) from e
