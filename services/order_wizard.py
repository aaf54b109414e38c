"""
Order wizard: the controller behind the ordering flow.

The wizard owns the draft order and the current WizardState, runs the
validator on every draft change and drives the submission protocol:

    1. submit() checks the state and the validation gate, freezes the draft
       and moves to SUBMITTING
    2. a submission thread waits the simulated processing delay
    3. under the wizard lock it prices the snapshot, records a HistoryEntry
       in the OrderHistoryStore and moves to CONFIRMED

While SUBMITTING every other submit() is rejected (not queued) and the
draft is read-only, so at most one submission is ever in flight.

Precondition violations (wrong state, unknown item, out-of-range quantity,
unknown field) never raise. They are logged at DEBUG and ignored so the
flow stays usable from any intermediate state.

Usage:
    wizard = OrderWizard(history_store, submission_delay_seconds=2.0)
    wizard.select_item("Pizza")
    wizard.change_quantity(+1)
    wizard.update_field("name", "Ada Lovelace")
    ...
    if wizard.submit():
        wizard.wait_for_submission(timeout=5.0)
    entry = wizard.last_order
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from models.catalog import Catalog, CatalogItem
from models.history import HistoryEntry
from models.order import DraftOrder, EDITABLE_FIELDS, MIN_QUANTITY, MAX_QUANTITY
from models.wizard_state import WizardState
from modules.pricing import line_total, unit_price
from modules.validator import validate
from services.history_store import OrderHistoryStore
from logging_config import get_logger, get_order_logger, set_thread_name


# Module logger
logger = get_logger(__name__)

EDITABLE_STATES = (WizardState.SELECTING_ITEM, WizardState.ENTERING_DELIVERY)


class OrderWizard:
    """
    Multi-step order wizard with an asynchronous submission step.

    Thread Safety:
        - All state lives behind self._lock (re-entrant)
        - The submission thread takes the same lock for its final
          record-and-confirm step, so readers never observe an order that is
          recorded but not yet confirmed
        - Lock order is wizard -> history store; the status scheduler only
          takes the store lock, so the two cannot deadlock

    Attributes:
        state: Current WizardState
        draft: Copy of the draft order
        errors: Validation errors from the last draft change
    """

    def __init__(
        self,
        history_store: OrderHistoryStore,
        catalog: Optional[Catalog] = None,
        submission_delay_seconds: float = 2.0,
    ):
        """
        Initialize the wizard at the menu step with an empty draft.

        Args:
            history_store: Store receiving submitted orders
            catalog: Menu to order from (default: the built-in menu)
            submission_delay_seconds: Simulated processing time per order
        """
        if submission_delay_seconds < 0:
            raise ValueError("submission_delay_seconds must not be negative")

        self._history_store = history_store
        self._catalog = catalog or Catalog()
        self._delay = submission_delay_seconds

        self._lock = threading.RLock()
        self._state = WizardState.SELECTING_ITEM
        self._draft = DraftOrder()
        self._errors: Dict[str, str] = {}
        self._last_order: Optional[HistoryEntry] = None
        self._last_error: Optional[str] = None

        # Submission thread control
        self._submission_thread: Optional[threading.Thread] = None
        self._submission_done = threading.Event()
        self._submission_done.set()
        self._shutdown_event = threading.Event()
        self._submission_count = 0

        logger.info(f"OrderWizard initialized (submission delay: {submission_delay_seconds}s)")

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def history_store(self) -> OrderHistoryStore:
        return self._history_store

    @property
    def state(self) -> WizardState:
        with self._lock:
            return self._state

    @property
    def draft(self) -> DraftOrder:
        with self._lock:
            return self._draft.copy()

    @property
    def errors(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._errors)

    @property
    def is_submitting(self) -> bool:
        with self._lock:
            return self._state is WizardState.SUBMITTING

    @property
    def can_submit(self) -> bool:
        """Whether submit() would currently be accepted."""
        with self._lock:
            return (
                self._state is WizardState.ENTERING_DELIVERY
                and not validate(self._draft)
            )

    @property
    def selected_item(self) -> Optional[CatalogItem]:
        with self._lock:
            return self._catalog.find(self._draft.item)

    @property
    def unit_price(self) -> Decimal:
        with self._lock:
            return unit_price(self._catalog, self._draft.item)

    @property
    def line_total(self) -> Decimal:
        with self._lock:
            return line_total(self._catalog, self._draft.item, self._draft.quantity)

    @property
    def last_order(self) -> Optional[HistoryEntry]:
        """Entry created by the most recent successful submission."""
        with self._lock:
            return self._last_order

    @property
    def last_error(self) -> Optional[str]:
        """Message from the last submission that failed unexpectedly."""
        with self._lock:
            return self._last_error

    @property
    def history(self) -> List[HistoryEntry]:
        return self._history_store.entries()

    def search(self, term: Optional[str] = None) -> List[CatalogItem]:
        """Filter the menu by name or category."""
        return self._catalog.search(term)

    def view(self) -> Dict[str, Any]:
        """
        Snapshot of everything a screen needs to render the current step.

        Returns a JSON-friendly dictionary.
        """
        with self._lock:
            item = self._catalog.find(self._draft.item)
            return {
                "state": self._state.value,
                "step": self._state.step,
                "viewing_history": self._state.is_viewing_history,
                "submitting": self._state is WizardState.SUBMITTING,
                "draft": self._draft.to_dict(),
                "errors": dict(self._errors),
                "can_submit": self.can_submit,
                "selected_item": item.to_dict() if item else None,
                "unit_price": float(self.unit_price),
                "line_total": float(self.line_total),
                "last_order": self._last_order.to_dict() if self._last_order else None,
                "last_error": self._last_error,
                "history_count": len(self._history_store),
            }

    # =========================================================================
    # STEP 1: ITEM SELECTION
    # =========================================================================

    def select_item(self, name: str) -> bool:
        """
        Choose a menu item and advance to the delivery step.

        Args:
            name: Catalog item name

        Returns:
            True if the selection was applied
        """
        with self._lock:
            if self._state is not WizardState.SELECTING_ITEM:
                logger.debug(f"select_item ignored in state {self._state.value}")
                return False
            if self._catalog.find(name) is None:
                logger.debug(f"select_item ignored for unknown item {name!r}")
                return False

            self._draft.item = name
            self._revalidate()
            self._state = WizardState.ENTERING_DELIVERY
            logger.debug(f"Selected {name}")
            return True

    # =========================================================================
    # STEP 2: DELIVERY DETAILS
    # =========================================================================

    def change_quantity(self, delta: int) -> int:
        """
        Add ``delta`` to the quantity, clamped to [MIN_QUANTITY, MAX_QUANTITY].

        Returns:
            The resulting quantity
        """
        with self._lock:
            if self._state not in EDITABLE_STATES:
                logger.debug(f"change_quantity ignored in state {self._state.value}")
                return self._draft.quantity
            if isinstance(delta, bool) or not isinstance(delta, int):
                logger.debug(f"change_quantity ignored for non-integer delta {delta!r}")
                return self._draft.quantity

            quantity = max(MIN_QUANTITY, min(MAX_QUANTITY, self._draft.quantity + delta))
            if quantity != self._draft.quantity:
                self._draft.quantity = quantity
                self._revalidate()
            return quantity

    def set_quantity(self, quantity: int) -> bool:
        """
        Set an absolute quantity. Values outside the allowed range are ignored.

        Returns:
            True if the quantity was applied
        """
        with self._lock:
            if self._state not in EDITABLE_STATES:
                logger.debug(f"set_quantity ignored in state {self._state.value}")
                return False
            if (
                isinstance(quantity, bool)
                or not isinstance(quantity, int)
                or not MIN_QUANTITY <= quantity <= MAX_QUANTITY
            ):
                logger.debug(f"set_quantity ignored for {quantity!r}")
                return False

            self._draft.quantity = quantity
            self._revalidate()
            return True

    def update_field(self, field: str, value: str) -> Dict[str, str]:
        """
        Overwrite one free-text field of the draft and re-validate.

        Args:
            field: One of name, address, phone, special_instructions
            value: New text

        Returns:
            Copy of the validation errors after the change
        """
        with self._lock:
            if self._state not in EDITABLE_STATES:
                logger.debug(f"update_field ignored in state {self._state.value}")
            elif field not in EDITABLE_FIELDS:
                logger.debug(f"update_field ignored for unknown field {field!r}")
            else:
                setattr(self._draft, field, "" if value is None else str(value))
                self._revalidate()
            return dict(self._errors)

    def go_back(self) -> bool:
        """Return from the delivery step to the menu, keeping the draft."""
        with self._lock:
            if self._state is not WizardState.ENTERING_DELIVERY:
                logger.debug(f"go_back ignored in state {self._state.value}")
                return False
            self._state = WizardState.SELECTING_ITEM
            return True

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    def submit(self) -> bool:
        """
        Start submitting the draft.

        Accepted only from ENTERING_DELIVERY with a valid draft. Returns
        immediately; poll ``state`` or call wait_for_submission().

        Returns:
            True if a submission was started, False if rejected
        """
        with self._lock:
            if self._state is WizardState.SUBMITTING:
                logger.debug("submit ignored: submission already in flight")
                return False
            if self._state is not WizardState.ENTERING_DELIVERY:
                logger.debug(f"submit ignored in state {self._state.value}")
                return False

            self._revalidate()
            if self._errors:
                logger.debug(f"submit rejected, invalid fields: {sorted(self._errors)}")
                return False

            snapshot = self._draft.freeze()
            self._state = WizardState.SUBMITTING
            self._last_error = None
            self._submission_count += 1
            thread_name = f"Submit-{self._submission_count}"

            self._submission_done.clear()
            thread = threading.Thread(
                target=self._submission_thread_main,
                args=(snapshot, thread_name),
                name=thread_name,
                daemon=True
            )
            self._submission_thread = thread
            thread.start()

        logger.info(f"Submitting {snapshot.quantity}x {snapshot.item} for {snapshot.name}")
        return True

    def wait_for_submission(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no submission is in flight.

        Returns:
            True if idle, False if the timeout expired first
        """
        return self._submission_done.wait(timeout)

    def shutdown(self, timeout: float = 5.0) -> None:
        """
        Abandon any submission still waiting out its delay and join its thread.

        Call this during application shutdown.
        """
        self._shutdown_event.set()
        thread = self._submission_thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Submission thread did not finish in time")

    def _submission_thread_main(self, snapshot, thread_name: str) -> None:
        set_thread_name(thread_name)

        try:
            if self._shutdown_event.wait(timeout=self._delay):
                logger.warning("Shutdown during submission, order not recorded")
                with self._lock:
                    if self._state is WizardState.SUBMITTING:
                        self._state = WizardState.ENTERING_DELIVERY
                return

            total = line_total(self._catalog, snapshot.item, snapshot.quantity)
            entry = HistoryEntry.create(snapshot, total)
            order_logger = get_order_logger(entry.id)

            with self._lock:
                self._history_store.record(entry)
                self._last_order = entry
                self._state = WizardState.CONFIRMED

            order_logger.info(f"Order {entry.id} confirmed, total {entry.total}")

        except Exception as e:
            logger.error(f"Submission failed: {e}", exc_info=True)
            with self._lock:
                self._last_error = str(e)
                if self._state is WizardState.SUBMITTING:
                    self._state = WizardState.ENTERING_DELIVERY

        finally:
            self._submission_done.set()

    # =========================================================================
    # CONFIRMATION / HISTORY
    # =========================================================================

    def start_new_order(self) -> bool:
        """Leave the confirmation screen with a fresh, empty draft."""
        with self._lock:
            if self._state is not WizardState.CONFIRMED:
                logger.debug(f"start_new_order ignored in state {self._state.value}")
                return False
            self._draft = DraftOrder()
            self._errors = {}
            self._state = WizardState.SELECTING_ITEM
            return True

    def reorder(self, entry: Union[HistoryEntry, str]) -> bool:
        """
        Seed the draft from a past order and jump to the delivery step.

        Works from any state except SUBMITTING.

        Args:
            entry: A HistoryEntry or the id of one in the history

        Returns:
            True if the draft was seeded
        """
        if isinstance(entry, str):
            found = self._history_store.get(entry)
            if found is None:
                logger.debug(f"reorder ignored for unknown entry {entry!r}")
                return False
            entry = found

        with self._lock:
            if self._state is WizardState.SUBMITTING:
                logger.debug("reorder ignored: submission in flight")
                return False

            self._draft = DraftOrder.from_snapshot(entry.order)
            self._revalidate()
            self._state = WizardState.ENTERING_DELIVERY
            logger.info(f"Reordering {entry.id} ({entry.order.quantity}x {entry.order.item})")
            return True

    def open_history(self) -> bool:
        """Show the history over the menu or confirmation screen."""
        with self._lock:
            target = self._state.with_history()
            if target is self._state:
                logger.debug(f"open_history ignored in state {self._state.value}")
                return False
            self._state = target
            return True

    def close_history(self) -> bool:
        """Hide the history and return to the screen beneath it."""
        with self._lock:
            if not self._state.is_viewing_history:
                return False
            self._state = self._state.underlying
            return True

    def _revalidate(self) -> None:
        # Caller holds self._lock. Errors are recomputed, never patched.
        self._errors = validate(self._draft)
