"""
Order history data models.

A HistoryEntry is written once by a successful submission. Afterwards only
its status moves, one step per scheduler tick:

    CONFIRMED -> PREPARING -> DELIVERED

The persisted form of an entry (see to_dict) keeps the field names of the
original browser application so existing stored histories still load.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Any, Iterable

from core.exceptions import MalformedHistoryError
from models.order import OrderSnapshot


HISTORY_CAPACITY = 10


class OrderStatus(Enum):
    """
    Delivery status of a submitted order.

    Lifecycle:
        CONFIRMED -> PREPARING -> DELIVERED (terminal)
    """

    CONFIRMED = "confirmed"
    """Order accepted, not yet in the kitchen."""

    PREPARING = "preparing"
    """Order is being prepared."""

    DELIVERED = "delivered"
    """Order delivered. No further transitions."""

    @property
    def is_terminal(self) -> bool:
        return self is OrderStatus.DELIVERED

    def next(self) -> "OrderStatus":
        """Return the following status; DELIVERED maps to itself."""
        if self is OrderStatus.CONFIRMED:
            return OrderStatus.PREPARING
        return OrderStatus.DELIVERED


_id_lock = threading.Lock()
_last_id = 0


def new_entry_id() -> str:
    """
    Return a unique, strictly increasing id derived from the clock.

    Ids are millisecond timestamps; two orders in the same millisecond get
    consecutive values.
    """
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


def reserve_entry_ids(existing_ids: Iterable[str]) -> None:
    """
    Make later ids sort after every id in ``existing_ids``.

    Called with ids loaded from storage so a clock that moved backwards
    since they were written cannot hand one out again. Non-numeric ids
    are skipped.
    """
    global _last_id
    highest = 0
    for entry_id in existing_ids:
        if entry_id.isdigit():
            highest = max(highest, int(entry_id))
    with _id_lock:
        if highest > _last_id:
            _last_id = highest


def _parse_total(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"total must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("total must be finite")
    try:
        total = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"total is not numeric: {value!r}") from e
    if not total.is_finite() or total < 0:
        raise ValueError(f"total must be a non-negative number, got {value!r}")
    return total


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValueError("timestamp must be a non-empty string")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class HistoryEntry:
    """
    A submitted order plus its delivery status.

    Frozen: status changes produce a new entry via advanced(), so entries
    handed out to callers never change underneath them.
    """

    id: str
    """Unique, time-derived identifier."""

    order: OrderSnapshot
    """Copy of the draft at submission time."""

    total: Decimal
    """Unit price x quantity at submission time. Never recomputed."""

    created_at: datetime
    """Submission time (UTC)."""

    status: OrderStatus = OrderStatus.CONFIRMED
    """Current delivery status."""

    @classmethod
    def create(cls, order: OrderSnapshot, total: Decimal) -> "HistoryEntry":
        """Create a freshly confirmed entry with a new id."""
        return cls(
            id=new_entry_id(),
            order=order,
            total=total,
            created_at=datetime.now(timezone.utc),
            status=OrderStatus.CONFIRMED,
        )

    def advanced(self) -> "HistoryEntry":
        """Return a copy moved one status step forward (self if terminal)."""
        if self.status.is_terminal:
            return self
        return replace(self, status=self.status.next())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON object."""
        return {
            "id": self.id,
            "orderData": self.order.to_dict(),
            "total": float(self.total),
            "timestamp": self.created_at.isoformat(),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """
        Create from a persisted JSON object.

        Raises:
            MalformedHistoryError: If any field is missing or invalid
        """
        if not isinstance(data, dict):
            raise MalformedHistoryError("entry is not an object")

        entry_id = data.get("id")
        if isinstance(entry_id, int) and not isinstance(entry_id, bool):
            entry_id = str(entry_id)
        if not isinstance(entry_id, str) or not entry_id:
            raise MalformedHistoryError("missing id")

        try:
            order = OrderSnapshot.from_dict(data.get("orderData"))
            total = _parse_total(data.get("total"))
            created_at = _parse_timestamp(data.get("timestamp"))
            status = OrderStatus(data.get("status"))
        except ValueError as e:
            raise MalformedHistoryError(str(e), entry_id=entry_id) from e

        return cls(
            id=entry_id,
            order=order,
            total=total,
            created_at=created_at,
            status=status,
        )
