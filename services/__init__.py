"""
Services layer for Quick Order.

This module contains the stateful services:
- OrderHistoryStore: bounded, persisted order history (single mutation point)
- StatusScheduler: background thread advancing order statuses every 30 seconds
- OrderWizard: step controller owning the draft and the submission protocol

Thread Model:
    Main Thread (Flask)
    ├── StatusScheduler thread (30-second tick loop)
    └── Submission threads (at most one alive, per accepted submit)

Both background threads write history only through OrderHistoryStore.
"""

from .history_store import OrderHistoryStore, serialize_history, deserialize_history
from .status_scheduler import StatusScheduler
from .order_wizard import OrderWizard

__all__ = [
    "OrderHistoryStore",
    "serialize_history",
    "deserialize_history",
    "StatusScheduler",
    "OrderWizard",
]
