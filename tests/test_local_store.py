from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from sfmap._constants import SNAPSHOT_STORAGE_KEY
from sfmap.local_store import LocalStore
from sfmap.models import Place, Provenance
from sfmap.storage import MemoryStorage


def _fixed_clock() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_save_then_load_round_trips_items_and_provenance() -> None:
    storage = MemoryStorage()
    store = LocalStore(storage, clock=_fixed_clock)
    places = [
        Place.from_row({"id": "1", "name": "A", "lng": 1, "lat": 2}),
        Place.from_row({"id": "2", "name": "B"}),
    ]

    store.save(places, Provenance.SUPABASE)
    snapshot = store.load()

    assert snapshot is not None
    assert snapshot.items == places
    assert snapshot.provenance is Provenance.SUPABASE
    assert snapshot.saved_at == _fixed_clock()
    envelope = json.loads(storage.get_item(SNAPSHOT_STORAGE_KEY) or "{}")
    assert set(envelope) == {"version", "savedAt", "mode", "items"}
    assert envelope["mode"] == "supabase"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "{broken",
        json.dumps([1, 2, 3]),
        json.dumps({"version": 1, "items": "nope"}),
        json.dumps({"version": 1}),
    ],
)
def test_load_fails_soft(raw: str | None) -> None:
    storage = MemoryStorage({} if raw is None else {SNAPSHOT_STORAGE_KEY: raw})
    assert LocalStore(storage).load() is None


def test_load_accepts_other_schema_versions() -> None:
    raw = json.dumps({"version": 99, "savedAt": None, "mode": "edited", "items": [{"id": "x"}]})
    snapshot = LocalStore(MemoryStorage({SNAPSHOT_STORAGE_KEY: raw})).load()

    assert snapshot is not None
    assert snapshot.version == 99
    assert [p.id for p in snapshot.items] == ["x"]


def test_save_is_a_single_write() -> None:
    class _CountingStorage(MemoryStorage):
        writes = 0

        def set_item(self, key: str, value: str) -> None:
            type(self).writes += 1
            super().set_item(key, value)

    storage = _CountingStorage()
    LocalStore(storage).save([Place.from_row({"id": "1"})], Provenance.EDITED)

    assert _CountingStorage.writes == 1


def test_clear_removes_snapshot() -> None:
    storage = MemoryStorage()
    store = LocalStore(storage)
    store.save([], Provenance.STATIC)
    store.clear()

    assert store.load() is None
