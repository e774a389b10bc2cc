"""Source selection and mirroring for the in-memory place list.

This is the only component allowed to replace the authoritative list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sfmap.directory.events import ChangeKind, DirectoryChange
from sfmap.directory.fallback import StaticFallback
from sfmap.exceptions import PlaceNotFoundError
from sfmap.local_store import LocalStore
from sfmap.models.place import Place
from sfmap.models.route import Coordinates
from sfmap.models.snapshot import Provenance
from sfmap.normalize import utcnow_iso
from sfmap.remote import RemoteStore

_logger = logging.getLogger(__name__)


class DirectoryReconciler:
    """Decide which source is authoritative and keep the local mirror in step.

    Load priority:

    1. local snapshot, when ``prefer_local`` is requested and it is non-empty;
    2. remote collection;
    3. bundled static fallback.

    Mutations go to the remote store first.  Only after it succeeds is the
    in-memory list patched and re-persisted as ``"edited"``, so the local
    snapshot always equals :attr:`items` once a call returns.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        fallback: StaticFallback | None = None,
        *,
        on_change: Callable[[DirectoryChange], None] | None = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._fallback = fallback if fallback is not None else StaticFallback()
        self._on_change = on_change
        self._items: list[Place] = []
        self._provenance: Provenance | None = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[Place]:
        """A copy of the current list; places themselves are immutable."""
        return list(self._items)

    @property
    def provenance(self) -> Provenance | None:
        return self._provenance

    def find(self, place_id: str) -> Place | None:
        key = str(place_id)
        return next((p for p in self._items if p.id == key), None)

    def _index_of(self, place_id: str) -> int:
        key = str(place_id)
        for idx, place in enumerate(self._items):
            if place.id == key:
                return idx
        raise PlaceNotFoundError(key)

    # ------------------------------------------------------------------
    # Reconciliation pass
    # ------------------------------------------------------------------

    async def load(self, *, prefer_local: bool = False, force_remote: bool = False) -> list[Place]:
        """Run one reconciliation pass and return the adopted list.

        ``force_remote`` skips the local snapshot even when ``prefer_local``
        is set.
        """
        if prefer_local and not force_remote:
            snapshot = self._local.load()
            if snapshot is not None and snapshot.items:
                self._items = list(snapshot.items)
                # Rows without an id were given one on parse; write them back.
                self._persist(snapshot.provenance or Provenance.EDITED)
                _logger.info("Using local edited data: count=%d", len(self._items))
                self._emit(ChangeKind.LOADED)
                return self.items
            _logger.warning("Local edited data is empty; reload remote data or the static list before editing")

        remote = await self._remote.list()
        if remote is not None:
            self._adopt(remote, Provenance.SUPABASE)
        else:
            _logger.warning("Remote places unavailable; using static fallback")
            self._adopt(self._fallback.load(), Provenance.STATIC)
        return self.items

    def _adopt(self, places: list[Place], provenance: Provenance) -> None:
        self._items = list(places)
        self._persist(provenance)
        _logger.info("Directory loaded from %s: count=%d", provenance, len(self._items))
        self._emit(ChangeKind.LOADED)

    # ------------------------------------------------------------------
    # Mutations (remote first, then mirror)
    # ------------------------------------------------------------------

    async def create(self, place: Place) -> Place:
        """Create remotely and prepend the stored row."""
        created = await self._remote.create(place)
        self._items.insert(0, created)
        self._persist(Provenance.EDITED)
        _logger.info("Place created: %s %s", created.id, created.name)
        self._emit(ChangeKind.CREATED, created.id)
        return created

    async def update(self, place_id: str, fields: Mapping[str, Any]) -> Place:
        """Patch one place remotely (stamping ``updated_at``) and replace it in the list.

        Raises
        ------
        PlaceNotFoundError
            If *place_id* is not in the current list; no remote call is made.
        """
        idx = self._index_of(place_id)
        current = self._items[idx]
        patch = {**fields, "updated_at": utcnow_iso()}
        updated = await self._remote.update(current.id, patch, current=current)
        self._replace(current.id, updated)
        _logger.info("Place saved: %s %s", updated.id, updated.name)
        self._emit(ChangeKind.UPDATED, updated.id)
        return updated

    async def relocate(self, place_id: str, coordinates: Coordinates) -> Place:
        """Push new coordinates remotely, then merge them into the local copy.

        The response row is not used; only the coordinates and stamp change.
        """
        idx = self._index_of(place_id)
        current = self._items[idx]
        patch = {"lng": coordinates.lng, "lat": coordinates.lat, "updated_at": utcnow_iso()}
        await self._remote.update(current.id, patch, current=current)
        relocated = current.merged(patch)
        self._replace(current.id, relocated)
        _logger.info("Place relocated: %s @ %s,%s", relocated.name, coordinates.lng, coordinates.lat)
        self._emit(ChangeKind.UPDATED, relocated.id)
        return relocated

    async def delete(self, place_id: str) -> None:
        key = self._items[self._index_of(place_id)].id
        await self._remote.delete(key)
        self._items = [p for p in self._items if p.id != key]
        self._persist(Provenance.EDITED)
        _logger.warning("Place deleted: %s", key)
        self._emit(ChangeKind.DELETED, key)

    def _replace(self, place_id: str, place: Place) -> None:
        # The list may have been reloaded while the request was in flight.
        try:
            idx = self._index_of(place_id)
        except PlaceNotFoundError:
            _logger.warning("Place %s no longer listed; dropping stale update", place_id)
        else:
            self._items[idx] = place
        self._persist(Provenance.EDITED)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(self, provenance: Provenance) -> None:
        self._local.save(self._items, provenance)
        self._provenance = provenance

    def _emit(self, kind: ChangeKind, place_id: str | None = None) -> None:
        if self._on_change is None or self._provenance is None:
            return
        change = DirectoryChange(kind=kind, provenance=self._provenance, count=len(self._items), place_id=place_id)
        try:
            self._on_change(change)
        except Exception:
            _logger.debug("Directory change listener failed", exc_info=True)
