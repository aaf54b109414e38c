"""
Wizard state model.

The step the user is on and whether the history screen is showing are kept
in one Enum rather than separate flags. Only legal combinations exist as
members, so e.g. "submitting while viewing history" cannot be expressed.

    SELECTING_ITEM ──select──> ENTERING_DELIVERY ──submit──> SUBMITTING
         ^    │                  │                              │
         │    └──back────────────┘                              v
         └───────────────new order─────────────────────── CONFIRMED

    SELECTING_ITEM <──open/close──> HISTORY_OVER_SELECTING
    CONFIRMED      <──open/close──> HISTORY_OVER_CONFIRMED
"""

from __future__ import annotations

from enum import Enum


class WizardState(Enum):
    """Every legal position of the order wizard."""

    SELECTING_ITEM = "selecting_item"
    ENTERING_DELIVERY = "entering_delivery"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    HISTORY_OVER_SELECTING = "history_over_selecting"
    HISTORY_OVER_CONFIRMED = "history_over_confirmed"

    @property
    def is_viewing_history(self) -> bool:
        return self in (
            WizardState.HISTORY_OVER_SELECTING,
            WizardState.HISTORY_OVER_CONFIRMED,
        )

    @property
    def underlying(self) -> "WizardState":
        """The step state beneath the history view (self when not viewing history)."""
        if self is WizardState.HISTORY_OVER_SELECTING:
            return WizardState.SELECTING_ITEM
        if self is WizardState.HISTORY_OVER_CONFIRMED:
            return WizardState.CONFIRMED
        return self

    @property
    def step(self) -> int:
        """Progress indicator number: 1 menu, 2 delivery, 3 confirmation."""
        base = self.underlying
        if base is WizardState.SELECTING_ITEM:
            return 1
        if base is WizardState.CONFIRMED:
            return 3
        return 2

    def with_history(self) -> "WizardState":
        """State after opening history, or self if history can't open here."""
        if self is WizardState.SELECTING_ITEM:
            return WizardState.HISTORY_OVER_SELECTING
        if self is WizardState.CONFIRMED:
            return WizardState.HISTORY_OVER_CONFIRMED
        return self
