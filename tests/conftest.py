"""
Shared fixtures for Quick Order tests.
"""

import threading
from decimal import Decimal

import pytest

from app import create_app, shutdown_services
from core.persistence import InMemoryPersistence
from models.history import HistoryEntry, OrderStatus
from models.order import OrderSnapshot
from services.history_store import OrderHistoryStore
from services.order_wizard import OrderWizard


VALID_CONTACT = {
    "name": "Ada Lovelace",
    "address": "12 Analytical Engine Road",
    "phone": "+44 (20) 7946-0958",
}


class BlockingPersistence(InMemoryPersistence):
    """
    In-memory store whose next set() parks until released.

    Lets a test hold one history mutation in the middle of its persist step
    while a second mutation is started from another thread.
    """

    def __init__(self):
        super().__init__()
        self.block_next_set = False
        self.entered = threading.Event()
        self.release = threading.Event()

    def set(self, key, blob):
        if self.block_next_set:
            self.block_next_set = False
            self.entered.set()
            self.release.wait(timeout=5.0)
        super().set(key, blob)


def make_snapshot(item="Pizza", quantity=1, **overrides):
    fields = dict(VALID_CONTACT)
    fields.update(overrides)
    return OrderSnapshot(item=item, quantity=quantity, **fields)


def make_entry(item="Pizza", quantity=1, total="12.99", status=OrderStatus.CONFIRMED, **overrides):
    entry = HistoryEntry.create(make_snapshot(item, quantity, **overrides), Decimal(total))
    if status is not OrderStatus.CONFIRMED:
        entry = HistoryEntry(
            id=entry.id,
            order=entry.order,
            total=entry.total,
            created_at=entry.created_at,
            status=status,
        )
    return entry


def fill_valid_contact(wizard):
    for field, value in VALID_CONTACT.items():
        wizard.update_field(field, value)


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def history_store(persistence):
    return OrderHistoryStore(persistence)


@pytest.fixture
def wizard(history_store):
    """Wizard with no submission delay."""
    wizard = OrderWizard(history_store, submission_delay_seconds=0.0)
    yield wizard
    wizard.shutdown()


@pytest.fixture
def app():
    app = create_app("config.TestingConfig")
    yield app
    shutdown_services(app)


@pytest.fixture
def client(app):
    return app.test_client()
