"""
Data models for Quick Order.

This module contains dataclasses and enums for:
- CatalogItem / Catalog: the static menu
- DraftOrder: the order being edited in the wizard
- OrderSnapshot: frozen copy of a draft taken at submission
- HistoryEntry / OrderStatus: submitted orders and their delivery status
- WizardState: every legal wizard position

Everything that crosses a thread boundary (OrderSnapshot, HistoryEntry,
CatalogItem) is frozen.
"""

from .catalog import Catalog, CatalogItem, MENU
from .order import DraftOrder, OrderSnapshot, MIN_QUANTITY, MAX_QUANTITY
from .history import HistoryEntry, OrderStatus, HISTORY_CAPACITY
from .wizard_state import WizardState

__all__ = [
    # Catalog models
    "Catalog",
    "CatalogItem",
    "MENU",
    # Order models
    "DraftOrder",
    "OrderSnapshot",
    "MIN_QUANTITY",
    "MAX_QUANTITY",
    # History models
    "HistoryEntry",
    "OrderStatus",
    "HISTORY_CAPACITY",
    # Wizard
    "WizardState",
]
