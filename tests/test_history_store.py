"""
Unit tests for the order history store.

Covers eviction at capacity, one-step status advancement, clearing,
corrupt-blob recovery, serialization round-trips and the record/advance race.
"""

import dataclasses
import json
import threading
import time

import pytest

from core.persistence import InMemoryPersistence
from models.history import OrderStatus
from services.history_store import (
    OrderHistoryStore,
    deserialize_history,
    serialize_history,
)
from tests.conftest import BlockingPersistence, make_entry


KEY = "orderHistory"


def _persisted(persistence):
    return deserialize_history(persistence.get(KEY))


class TestRecord:

    def test_record_prepends_and_persists(self, history_store, persistence):
        first = make_entry(item="Pizza")
        second = make_entry(item="Taco", total="9.99")

        history_store.record(first)
        result = history_store.record(second)

        assert [e.id for e in result] == [second.id, first.id]
        assert _persisted(persistence) == result

    def test_record_at_capacity_evicts_oldest(self, history_store, persistence):
        entries = [make_entry() for _ in range(10)]
        for entry in entries:
            history_store.record(entry)
        oldest = entries[0]
        assert len(history_store) == 10

        newest = make_entry(item="Ramen", total="11.99")
        result = history_store.record(newest)

        assert len(result) == 10
        assert result[0] == newest
        assert oldest.id not in [e.id for e in result]
        assert len(_persisted(persistence)) == 10

    def test_custom_capacity(self, persistence):
        store = OrderHistoryStore(persistence, capacity=2)
        for _ in range(5):
            store.record(make_entry())
        assert len(store) == 2

    def test_invalid_capacity(self, persistence):
        with pytest.raises(ValueError):
            OrderHistoryStore(persistence, capacity=0)

    def test_entries_returns_copy(self, history_store):
        history_store.record(make_entry())
        entries = history_store.entries()
        entries.clear()
        assert len(history_store) == 1

    def test_get(self, history_store):
        entry = make_entry()
        history_store.record(entry)
        assert history_store.get(entry.id) == entry
        assert history_store.get("missing") is None


class TestAdvanceAll:

    def test_each_entry_moves_exactly_one_step(self, history_store):
        confirmed = make_entry()
        preparing = make_entry(status=OrderStatus.PREPARING)
        delivered = make_entry(status=OrderStatus.DELIVERED)
        for entry in (delivered, preparing, confirmed):
            history_store.record(entry)

        advanced = history_store.advance_all()

        assert advanced == 2
        by_id = {e.id: e.status for e in history_store.entries()}
        assert by_id[confirmed.id] is OrderStatus.PREPARING
        assert by_id[preparing.id] is OrderStatus.DELIVERED
        assert by_id[delivered.id] is OrderStatus.DELIVERED

    def test_totals_and_snapshots_are_untouched(self, history_store):
        entry = make_entry(item="Sushi", quantity=2, total="31.98")
        history_store.record(entry)
        history_store.advance_all()
        after = history_store.get(entry.id)
        assert after.total == entry.total
        assert after.order == entry.order
        assert after.created_at == entry.created_at

    def test_all_delivered_is_a_no_op(self, history_store, persistence):
        for _ in range(3):
            history_store.record(make_entry(status=OrderStatus.DELIVERED))
        before = history_store.entries()
        writes = persistence.write_count

        assert history_store.advance_all() == 0
        assert history_store.entries() == before
        assert persistence.write_count == writes

    def test_empty_history_is_a_no_op(self, history_store, persistence):
        assert history_store.advance_all() == 0
        assert persistence.write_count == 0
        assert persistence.get(KEY) is None

    def test_advancement_is_persisted(self, history_store, persistence):
        history_store.record(make_entry())
        history_store.advance_all()
        assert _persisted(persistence)[0].status is OrderStatus.PREPARING


class TestClearAndLoad:

    def test_clear_removes_blob(self, history_store, persistence):
        history_store.record(make_entry())
        history_store.clear()
        assert len(history_store) == 0
        assert persistence.get(KEY) is None

    def test_load_existing_history(self, persistence):
        entries = [make_entry(), make_entry(status=OrderStatus.DELIVERED)]
        persistence.set(KEY, serialize_history(entries))

        store = OrderHistoryStore(persistence)
        assert store.entries() == entries

    @pytest.mark.parametrize("blob", [None, "", "not json", "{}", "42", '"text"'])
    def test_unusable_blob_gives_empty_history(self, blob):
        persistence = InMemoryPersistence({KEY: blob} if blob is not None else {})
        store = OrderHistoryStore(persistence)
        assert store.entries() == []

    def test_malformed_entries_are_discarded(self):
        good = make_entry()
        raw = [
            good.to_dict(),
            {"id": "broken"},
            "not an object",
            dict(good.to_dict(), id="bad-status", status="lost"),
        ]
        persistence = InMemoryPersistence({KEY: json.dumps(raw)})

        store = OrderHistoryStore(persistence)
        assert store.entries() == [good]

    def test_duplicate_ids_keep_first(self):
        entry = make_entry()
        duplicate = dict(entry.to_dict(), status="delivered")
        persistence = InMemoryPersistence({KEY: json.dumps([entry.to_dict(), duplicate])})

        store = OrderHistoryStore(persistence)
        assert store.entries() == [entry]

    def test_oversized_history_trimmed_on_load(self):
        entries = [make_entry() for _ in range(12)]
        persistence = InMemoryPersistence({KEY: serialize_history(entries)})

        store = OrderHistoryStore(persistence)
        assert store.entries() == entries[:10]

    def test_loaded_ids_are_never_handed_out_again(self):
        future_id = str(int(time.time() * 1000) + 10_000_000)
        stored = dataclasses.replace(make_entry(), id=future_id)
        persistence = InMemoryPersistence({KEY: serialize_history([stored])})

        store = OrderHistoryStore(persistence)
        new_entry = make_entry()
        assert int(new_entry.id) > int(future_id)

        store.record(new_entry)
        reloaded = OrderHistoryStore(persistence)
        assert [e.id for e in reloaded.entries()] == [new_entry.id, future_id]


class TestSerialization:

    def test_round_trip(self):
        entries = [
            make_entry(item="Pizza", quantity=2, total="25.98", special_instructions="Ring twice"),
            make_entry(item="Taco", total="9.99", status=OrderStatus.PREPARING),
            make_entry(item="Salad", total="7.99", status=OrderStatus.DELIVERED),
        ]
        restored = deserialize_history(serialize_history(entries))
        assert restored == entries

    def test_wire_format(self):
        entry = make_entry(item="Pizza", quantity=2, total="25.98")
        data = json.loads(serialize_history([entry]))
        assert data[0]["orderData"]["item"] == "Pizza"
        assert data[0]["orderData"]["quantity"] == 2
        assert data[0]["total"] == 25.98
        assert data[0]["status"] == "confirmed"


class TestConcurrentMutation:
    """
    A submission's record() and a scheduler tick's advance_all() both
    rewrite the whole list. Whichever runs second must see the result of
    the first, so neither update is lost.
    """

    def _store_with_confirmed(self, count=3):
        persistence = BlockingPersistence()
        store = OrderHistoryStore(persistence)
        existing = [make_entry() for _ in range(count)]
        for entry in existing:
            store.record(entry)
        return persistence, store, existing

    def test_tick_during_record(self):
        persistence, store, existing = self._store_with_confirmed()
        new_entry = make_entry(item="Ramen", total="11.99")

        persistence.block_next_set = True
        recorder = threading.Thread(target=store.record, args=(new_entry,))
        recorder.start()
        assert persistence.entered.wait(timeout=5.0)

        ticker = threading.Thread(target=store.advance_all)
        ticker.start()
        ticker.join(timeout=0.2)
        assert ticker.is_alive(), "tick must wait for the in-flight record"

        persistence.release.set()
        recorder.join(timeout=5.0)
        ticker.join(timeout=5.0)

        final = _persisted(persistence)
        ids = [e.id for e in final]
        assert ids[0] == new_entry.id
        statuses = {e.id: e.status for e in final}
        for entry in existing:
            assert statuses[entry.id] is OrderStatus.PREPARING
        assert store.entries() == final

    def test_record_during_tick(self):
        persistence, store, existing = self._store_with_confirmed()
        new_entry = make_entry(item="Burger", total="8.99")

        persistence.block_next_set = True
        ticker = threading.Thread(target=store.advance_all)
        ticker.start()
        assert persistence.entered.wait(timeout=5.0)

        recorder = threading.Thread(target=store.record, args=(new_entry,))
        recorder.start()
        recorder.join(timeout=0.2)
        assert recorder.is_alive(), "record must wait for the in-flight tick"

        persistence.release.set()
        ticker.join(timeout=5.0)
        recorder.join(timeout=5.0)

        final = _persisted(persistence)
        assert final[0].id == new_entry.id
        assert final[0].status is OrderStatus.CONFIRMED
        for entry in final[1:]:
            assert entry.status is OrderStatus.PREPARING
        assert len(final) == len(existing) + 1
        assert store.entries() == final
