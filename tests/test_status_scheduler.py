"""
Unit tests for the status scheduler background thread.
"""

import time
from unittest.mock import MagicMock

import pytest

from models.history import OrderStatus
from services.status_scheduler import StatusScheduler
from tests.conftest import make_entry


def _wait_until(predicate, timeout=3.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class TestStatusSchedulerTick:

    def test_tick_advances_history(self, history_store):
        entry = make_entry()
        history_store.record(entry)
        scheduler = StatusScheduler(history_store, interval_seconds=30.0)

        assert scheduler.tick() == 1
        assert history_store.get(entry.id).status is OrderStatus.PREPARING
        assert scheduler.tick() == 1
        assert history_store.get(entry.id).status is OrderStatus.DELIVERED
        assert scheduler.tick() == 0
        assert scheduler.tick_count == 3

    def test_tick_failure_is_contained(self):
        store = MagicMock()
        store.advance_all.side_effect = OSError("disk full")
        scheduler = StatusScheduler(store, interval_seconds=30.0)

        assert scheduler.tick() == 0
        assert scheduler.tick() == 0
        assert scheduler.tick_count == 0

        store.advance_all.side_effect = None
        store.advance_all.return_value = 2
        assert scheduler.tick() == 2
        assert scheduler.tick_count == 1

    def test_interval_must_be_positive(self, history_store):
        with pytest.raises(ValueError):
            StatusScheduler(history_store, interval_seconds=0)


class TestStatusSchedulerThread:

    def test_not_started_by_constructor(self, history_store):
        scheduler = StatusScheduler(history_store, interval_seconds=0.01)
        assert not scheduler.is_running
        assert scheduler.interval_seconds == 0.01

    def test_background_ticks_deliver_orders(self, history_store):
        entries = [make_entry(), make_entry(status=OrderStatus.PREPARING)]
        for entry in entries:
            history_store.record(entry)

        scheduler = StatusScheduler(history_store, interval_seconds=0.02)
        scheduler.start()
        try:
            delivered = _wait_until(
                lambda: all(e.status is OrderStatus.DELIVERED for e in history_store.entries())
            )
        finally:
            scheduler.stop()

        assert delivered
        assert not scheduler.is_running

    def test_no_writes_after_stop(self, history_store, persistence):
        scheduler = StatusScheduler(history_store, interval_seconds=0.02)
        scheduler.start()
        assert _wait_until(lambda: scheduler.tick_count >= 2)
        scheduler.stop()

        # Anything recorded after stop() stays untouched.
        entry = make_entry()
        history_store.record(entry)
        writes = persistence.write_count
        ticks = scheduler.tick_count

        time.sleep(0.15)

        assert persistence.write_count == writes
        assert scheduler.tick_count == ticks
        assert history_store.get(entry.id).status is OrderStatus.CONFIRMED

    def test_start_and_stop_are_idempotent(self, history_store):
        scheduler = StatusScheduler(history_store, interval_seconds=0.05)
        scheduler.start()
        scheduler.start()
        assert scheduler.is_running

        scheduler.stop()
        scheduler.stop()
        assert not scheduler.is_running

    def test_first_tick_waits_one_interval(self, history_store):
        entry = make_entry()
        history_store.record(entry)

        scheduler = StatusScheduler(history_store, interval_seconds=10.0)
        scheduler.start()
        scheduler.stop()

        assert scheduler.tick_count == 0
        assert history_store.get(entry.id).status is OrderStatus.CONFIRMED
