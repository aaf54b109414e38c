"""
Custom exceptions for Quick Order.

Exception Hierarchy:
    QuickOrderError (base)
    ├── PersistenceError        - Backing store could not be read or written
    ├── MalformedHistoryError   - A stored history entry could not be decoded
    └── ServiceUnavailableError - A route needed a service that is not configured

Validation problems are never raised; they are returned as data by
modules.validator. Wizard precondition violations are silent no-ops.
MalformedHistoryError never leaves the history store: bad entries are
dropped and the rest of the history still loads.
"""

from typing import Optional, Dict, Any


class QuickOrderError(Exception):
    """
    Base exception for all Quick Order errors.

    Carries a human-readable message plus an optional ``details`` dict
    with debugging context.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class PersistenceError(QuickOrderError):
    """
    The persistence backend failed to read or write a blob.

    Raised by concrete adapters (e.g. an unwritable history file).
    """

    def __init__(self, operation: str, key: str, reason: str):
        message = f"Persistence {operation} failed for '{key}': {reason}"
        details = {
            "operation": operation,
            "key": key,
            "resolution": "Check that the history file location is writable"
        }
        super().__init__(message, details)
        self.operation = operation
        self.key = key


class MalformedHistoryError(QuickOrderError):
    """A persisted history entry is missing fields or has invalid values."""

    def __init__(self, reason: str, entry_id: Optional[str] = None):
        details = {"entry_id": entry_id} if entry_id else {}
        super().__init__(f"Malformed history entry: {reason}", details)
        self.reason = reason
        self.entry_id = entry_id


class ServiceUnavailableError(QuickOrderError):
    """A route asked for a service that was never registered on the app."""

    def __init__(self, service_name: str):
        message = f"{service_name} is not available"
        details = {
            "service": service_name,
            "resolution": "Create the app through create_app() so services are registered"
        }
        super().__init__(message, details)
        self.service_name = service_name
