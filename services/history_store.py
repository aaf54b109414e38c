"""
Order history store with write-through persistence.

The store owns the bounded list of past orders (newest first, at most
HISTORY_CAPACITY entries) and is the ONLY place that list is mutated.

Two independent actors write to it:
    - the wizard's submission thread calls record()
    - the status scheduler thread calls advance_all()

Both are read-modify-write operations on the whole list. Every mutation runs
under one lock and persists before releasing it, so a tick that races a
submission always sees the list the submission produced (and vice versa).
Neither update can be lost by being applied to a stale copy.

Persisted format (JSON array, newest first):
    [{"id": "...", "orderData": {...}, "total": 25.98,
      "timestamp": "2026-10-19T08:00:00+00:00", "status": "confirmed"}]

Usage:
    store = OrderHistoryStore(InMemoryPersistence())
    store.record(HistoryEntry.create(snapshot, total))
    store.advance_all()
    entries = store.entries()
"""

from __future__ import annotations

import json
import threading
from typing import Iterable, List, Optional

from core.exceptions import MalformedHistoryError
from core.persistence import PersistenceAdapter
from models.history import HistoryEntry, HISTORY_CAPACITY, reserve_entry_ids
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

DEFAULT_HISTORY_KEY = "orderHistory"


def serialize_history(entries: Iterable[HistoryEntry]) -> str:
    """Encode a history list as the persisted JSON array."""
    return json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False)


def deserialize_history(blob: Optional[str]) -> List[HistoryEntry]:
    """
    Decode a persisted blob, discarding anything that does not parse.

    A missing blob, invalid JSON or a non-array top level yields an empty
    list. Individual malformed entries are dropped (and logged); the rest
    of the history is kept. Duplicate ids keep their first occurrence.
    """
    if not blob:
        return []

    try:
        raw = json.loads(blob)
    except ValueError as e:
        logger.warning(f"Order history blob is not valid JSON, starting empty: {e}")
        return []

    if not isinstance(raw, list):
        logger.warning("Order history blob is not a list, starting empty")
        return []

    entries: List[HistoryEntry] = []
    seen_ids = set()
    for index, item in enumerate(raw):
        try:
            entry = HistoryEntry.from_dict(item)
        except MalformedHistoryError as e:
            logger.warning(f"Discarding history entry #{index}: {e}")
            continue
        if entry.id in seen_ids:
            logger.warning(f"Discarding duplicate history entry {entry.id}")
            continue
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries


class OrderHistoryStore:
    """
    Bounded, persisted order history.

    Thread Safety:
        - All mutations (record, advance_all, clear, load) hold self._lock
          for the whole read-modify-persist cycle
        - Readers get copies of the list; entries themselves are frozen

    Attributes:
        capacity: Maximum number of entries kept
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        key: str = DEFAULT_HISTORY_KEY,
        capacity: int = HISTORY_CAPACITY,
    ):
        """
        Initialize the store and load any persisted history.

        Args:
            persistence: Blob store holding the serialized history
            key: Key of the history blob
            capacity: Maximum number of entries kept (oldest evicted first)
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self._persistence = persistence
        self._key = key
        self._capacity = capacity
        self._entries: List[HistoryEntry] = []
        self._lock = threading.Lock()

        self.load()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> List[HistoryEntry]:
        """Return a copy of the history, newest first."""
        with self._lock:
            return list(self._entries)

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        """Return the entry with ``entry_id`` or None."""
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    def load(self) -> List[HistoryEntry]:
        """
        Replace the in-memory list with the persisted one.

        Never raises for bad data: a corrupt blob gives an empty history.
        A history longer than capacity is cut to the newest entries.

        Returns:
            Copy of the loaded history
        """
        with self._lock:
            blob = self._persistence.get(self._key)
            entries = deserialize_history(blob)
            if len(entries) > self._capacity:
                logger.info(
                    f"Persisted history has {len(entries)} entries, keeping newest {self._capacity}"
                )
                entries = entries[:self._capacity]
            self._entries = entries
            reserve_entry_ids(entry.id for entry in entries)
            logger.info(f"Loaded {len(entries)} history entries")
            return list(self._entries)

    def record(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """
        Prepend a new entry, evicting the oldest beyond capacity, and persist.

        Args:
            entry: Newly submitted order

        Returns:
            Copy of the updated history
        """
        with self._lock:
            updated = [entry] + self._entries
            evicted = updated[self._capacity:]
            updated = updated[:self._capacity]

            self._write(updated)
            self._entries = updated

            if evicted:
                logger.debug(f"Evicted {len(evicted)} oldest history entries")
            logger.info(f"Recorded order {entry.id} ({len(updated)} in history)")
            return list(self._entries)

    def advance_all(self) -> int:
        """
        Move every non-delivered entry exactly one status step forward.

        Persists only when at least one entry changed, so ticks over an
        empty or fully delivered history write nothing.

        Returns:
            Number of entries advanced
        """
        with self._lock:
            advanced = 0
            updated: List[HistoryEntry] = []
            for entry in self._entries:
                next_entry = entry.advanced()
                if next_entry is not entry:
                    advanced += 1
                updated.append(next_entry)

            if advanced:
                self._write(updated)
                self._entries = updated
                logger.debug(f"Advanced status of {advanced} history entries")
            return advanced

    def clear(self) -> None:
        """Empty the history and remove the persisted blob."""
        with self._lock:
            self._persistence.remove(self._key)
            self._entries = []
            logger.info("Order history cleared")

    def _write(self, entries: List[HistoryEntry]) -> None:
        # Caller holds self._lock and swaps self._entries only after this returns.
        self._persistence.set(self._key, serialize_history(entries))
