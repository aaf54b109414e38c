"""
Core module for Quick Order.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- persistence: Key/value blob stores behind the PersistenceAdapter interface
"""

from .exceptions import (
    QuickOrderError,
    PersistenceError,
    MalformedHistoryError,
    ServiceUnavailableError,
)
from .persistence import PersistenceAdapter, InMemoryPersistence, JsonFilePersistence

__all__ = [
    "QuickOrderError",
    "PersistenceError",
    "MalformedHistoryError",
    "ServiceUnavailableError",
    "PersistenceAdapter",
    "InMemoryPersistence",
    "JsonFilePersistence",
]
