from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from sfmap._constants import SNAPSHOT_STORAGE_KEY
from sfmap.directory.events import ChangeKind, DirectoryChange
from sfmap.directory.fallback import StaticFallback
from sfmap.directory.reconciler import DirectoryReconciler
from sfmap.exceptions import PlaceNotFoundError, RemoteRequestError
from sfmap.local_store import LocalStore
from sfmap.models import Coordinates, Place, Provenance
from sfmap.storage import MemoryStorage


class _StubRemote:
    """In-memory stand-in for the remote collection."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = None if rows is None else [Place.from_row(r) for r in rows]
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def list(self) -> list[Place] | None:
        self.calls.append("list")
        return None if self.rows is None else list(self.rows)

    async def create(self, place: Place) -> Place:
        self._check("create")
        stored = Place.from_row({**place.to_remote_row(), "id": f"srv-{len(self.rows or [])}"})
        self.rows = [stored, *(self.rows or [])]
        return stored

    async def update(self, place_id: str, patch: Mapping[str, Any], *, current: Place | None = None) -> Place:
        self._check("update")
        assert current is not None
        return current.merged(patch)

    async def delete(self, place_id: str) -> None:
        self._check("delete")
        self.rows = [p for p in (self.rows or []) if p.id != place_id]


def _reconciler(
    remote: _StubRemote,
    storage: MemoryStorage | None = None,
    **kwargs: Any,
) -> tuple[DirectoryReconciler, LocalStore]:
    local = LocalStore(storage if storage is not None else MemoryStorage())
    return DirectoryReconciler(local, remote, **kwargs), local  # type: ignore[arg-type]


def _assert_mirrored(reconciler: DirectoryReconciler, local: LocalStore) -> None:
    snapshot = local.load()
    assert snapshot is not None
    assert snapshot.items == reconciler.items


@pytest.mark.asyncio
async def test_boot_adopts_remote_and_persists_supabase_provenance() -> None:
    remote = _StubRemote([{"id": "1", "name": "Noodle Stand", "city": "Chengdu", "lng": 104.06, "lat": 30.67}])
    reconciler, local = _reconciler(remote)

    items = await reconciler.load()

    assert len(items) == 1
    snapshot = local.load()
    assert snapshot is not None and snapshot.provenance is Provenance.SUPABASE
    assert reconciler.provenance is Provenance.SUPABASE
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_boot_falls_back_to_bundled_list_when_remote_unavailable() -> None:
    fallback = StaticFallback()
    reconciler, local = _reconciler(_StubRemote(None), fallback=fallback)

    items = await reconciler.load()

    assert len(items) == len(fallback.load()) == 5
    snapshot = local.load()
    assert snapshot is not None and snapshot.provenance is Provenance.STATIC
    kb4 = reconciler.find("kb-0004")
    assert kb4 is not None and not kb4.has_coordinates


@pytest.mark.asyncio
async def test_prefer_local_skips_remote_when_snapshot_has_items() -> None:
    storage = MemoryStorage()
    LocalStore(storage).save([Place.from_row({"id": "L1", "name": "Local"})], Provenance.EDITED)
    remote = _StubRemote([{"id": "R1"}])
    reconciler, _ = _reconciler(remote, storage)

    items = await reconciler.load(prefer_local=True)

    assert [p.id for p in items] == ["L1"]
    assert reconciler.provenance is Provenance.EDITED
    assert remote.calls == []


@pytest.mark.asyncio
async def test_prefer_local_persists_ids_for_hand_edited_rows() -> None:
    storage = MemoryStorage()
    snapshot = {"version": 1, "savedAt": None, "mode": "edited", "items": [{"name": "No id", "city": "成都"}]}
    storage.set_item(SNAPSHOT_STORAGE_KEY, json.dumps(snapshot, ensure_ascii=False))
    reconciler, local = _reconciler(_StubRemote([]), storage)

    items = await reconciler.load(prefer_local=True)

    assert [p.name for p in items] == ["No id"]
    assert reconciler.provenance is Provenance.EDITED
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_prefer_local_falls_through_when_snapshot_empty(caplog: pytest.LogCaptureFixture) -> None:
    storage = MemoryStorage()
    LocalStore(storage).save([], Provenance.EDITED)
    remote = _StubRemote([{"id": "R1"}])
    reconciler, _ = _reconciler(remote, storage)

    with caplog.at_level("WARNING", logger="sfmap.directory.reconciler"):
        items = await reconciler.load(prefer_local=True)

    assert [p.id for p in items] == ["R1"]
    assert any("empty" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_force_remote_overrides_prefer_local() -> None:
    storage = MemoryStorage()
    LocalStore(storage).save([Place.from_row({"id": "L1"})], Provenance.EDITED)
    remote = _StubRemote([{"id": "R1"}])
    reconciler, _ = _reconciler(remote, storage)

    items = await reconciler.load(prefer_local=True, force_remote=True)

    assert [p.id for p in items] == ["R1"]
    assert remote.calls == ["list"]


@pytest.mark.asyncio
async def test_create_then_list_contains_same_fields() -> None:
    remote = _StubRemote([])
    reconciler, local = _reconciler(remote)
    await reconciler.load()

    draft = Place.from_row({"name": "Tea", "city": "成都", "address": "宽窄巷子", "category": "饮品"})
    created = await reconciler.create(draft)

    listed = await remote.list()
    assert listed is not None
    assert any(
        (p.name, p.city, p.address, p.category) == (draft.name, draft.city, draft.address, draft.category)
        for p in listed
    )
    assert reconciler.items[0] == created
    assert reconciler.provenance is Provenance.EDITED
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_update_replaces_in_place_and_stamps() -> None:
    remote = _StubRemote([{"id": "1", "name": "A"}, {"id": "2", "name": "B"}])
    reconciler, local = _reconciler(remote)
    await reconciler.load()

    updated = await reconciler.update("2", {"name": "B2"})

    assert [p.name for p in reconciler.items] == ["A", "B2"]
    assert updated.updated_at is not None
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_relocate_merges_only_coordinates() -> None:
    remote = _StubRemote([{"id": "1", "name": "A", "city": "成都"}])
    reconciler, local = _reconciler(remote)
    await reconciler.load()

    moved = await reconciler.relocate("1", Coordinates(lng=104.1, lat=30.6))

    assert (moved.lng, moved.lat, moved.name, moved.city) == (104.1, 30.6, "A", "成都")
    assert remote.calls[-1] == "update"
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_delete_removes_and_mirrors() -> None:
    remote = _StubRemote([{"id": "1"}, {"id": "2"}])
    reconciler, local = _reconciler(remote)
    await reconciler.load()

    await reconciler.delete("1")

    assert [p.id for p in reconciler.items] == ["2"]
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_failed_mutation_leaves_list_and_snapshot_untouched() -> None:
    remote = _StubRemote([{"id": "1", "name": "A"}])
    reconciler, local = _reconciler(remote)
    await reconciler.load()
    remote.fail_with = RemoteRequestError("nope", status_code=500, body="nope")

    with pytest.raises(RemoteRequestError):
        await reconciler.update("1", {"name": "B"})

    assert [p.name for p in reconciler.items] == ["A"]
    snapshot = local.load()
    assert snapshot is not None and snapshot.provenance is Provenance.SUPABASE
    _assert_mirrored(reconciler, local)


@pytest.mark.asyncio
async def test_unknown_id_raises_before_remote_call() -> None:
    remote = _StubRemote([{"id": "1"}])
    reconciler, _ = _reconciler(remote)
    await reconciler.load()

    with pytest.raises(PlaceNotFoundError):
        await reconciler.delete("missing")
    assert remote.calls == ["list"]


@pytest.mark.asyncio
async def test_change_events_are_emitted_and_listener_errors_ignored() -> None:
    seen: list[DirectoryChange] = []

    def _listener(change: DirectoryChange) -> None:
        seen.append(change)
        raise RuntimeError("view crashed")

    reconciler, _ = _reconciler(_StubRemote([{"id": "1"}]), on_change=_listener)
    await reconciler.load()
    await reconciler.delete("1")

    assert [c.kind for c in seen] == [ChangeKind.LOADED, ChangeKind.DELETED]
    assert seen[-1].count == 0
    assert seen[-1].place_id == "1"


def test_static_fallback_from_path(tmp_path: Path) -> None:
    path = tmp_path / "kb.json"
    path.write_text(json.dumps({"items": [{"id": "a", "location": {"lng": 1, "lat": 2}}, "junk"]}), encoding="utf-8")

    items = StaticFallback(path).load()

    assert [(p.id, p.lng, p.lat) for p in items] == [("a", 1.0, 2.0)]


def test_static_fallback_malformed_document_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "kb.json"
    path.write_text("[]", encoding="utf-8")

    assert StaticFallback(path).load() == []
