"""High-level async client: the directory, its editor flows and navigation."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from sfmap._constants import FILTER_DEBOUNCE_SECONDS
from sfmap._transport import HttpTransport, Transport
from sfmap.busy import BusyCounter, Debouncer
from sfmap.config import ConfigResolver, SfmConfig
from sfmap.directory.events import DirectoryChange
from sfmap.directory.fallback import StaticFallback
from sfmap.directory.filters import PlaceFilter, apply_filter, category_facets, city_facets, default_city
from sfmap.directory.reconciler import DirectoryReconciler
from sfmap.exceptions import PlaceValidationError, SfmError
from sfmap.geocoder import Geocoder
from sfmap.geolocation import DeviceLocator, GeolocationFactory
from sfmap.handoff import detect_platform, is_mobile
from sfmap.local_store import LocalStore
from sfmap.log_level import apply_log_level, load_log_level, save_log_level
from sfmap.models.place import Place, PlaceDraft, new_place_id
from sfmap.models.route import Coordinates, RouteResult, TravelMode
from sfmap.navigation import Navigator, RouteRenderer
from sfmap.normalize import utcnow_iso
from sfmap.remote import RemoteStore
from sfmap.routing import RoutePlanner
from sfmap.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(slots=True)
class _Components:
    directory: DirectoryReconciler
    geocoder: Geocoder
    planner: RoutePlanner
    navigator: Navigator


class SfmClient:
    """Explicit store object for one directory session.

    Usage::

        async with SfmClient(JsonFileStorage("~/.sfmap/state.json")) as client:
            await client.boot()
            client.update_filter(text="粉")
            await client.dispatch(client.visible[0].id)

    Only the view layer's hooks (renderer, launcher, callbacks) are
    injected; everything else is owned here and torn down with the client.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        defaults: SfmConfig | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        geolocation: GeolocationFactory | None = None,
        user_agent: str = "",
        fallback: StaticFallback | None = None,
        renderer: RouteRenderer | None = None,
        launcher: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_change: Callable[[DirectoryChange], None] | None = None,
        on_busy: Callable[[bool, str], None] | None = None,
        on_filter: Callable[[list[Place]], None] | None = None,
        filter_delay: float = FILTER_DEBOUNCE_SECONDS,
    ) -> None:
        self._storage = storage
        self._config = ConfigResolver(storage, defaults if defaults is not None else SfmConfig.from_env())
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._geolocation = geolocation
        self._user_agent = user_agent
        self._fallback = fallback
        self._renderer = renderer
        self._launcher = launcher
        self._on_error = on_error
        self._on_change = on_change
        self._on_filter = on_filter
        self._busy = BusyCounter(on_busy)
        self._components: _Components | None = None

        self._selected_id: str | None = None
        self._edit_mode = "none"
        self._filter = PlaceFilter()
        self._pending_text = ""
        self._visible: list[Place] = []
        self._debouncer = Debouncer(filter_delay, self._apply_pending_text)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> SfmClient:
        """Wire transport and components. Idempotent."""
        if self._components is not None:
            return self
        apply_log_level(load_log_level(self._storage))

        transport = self._transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(self._http_session)

        effective = self._config.effective
        directory = DirectoryReconciler(
            LocalStore(self._storage),
            RemoteStore(effective, transport),
            self._fallback,
            on_change=self._handle_change,
        )
        planner = RoutePlanner(effective, transport, DeviceLocator(self._geolocation))
        self._components = _Components(
            directory=directory,
            geocoder=Geocoder(effective, transport),
            planner=planner,
            navigator=Navigator(
                directory,
                planner,
                platform=detect_platform(self._user_agent),
                launcher=self._launcher,
                renderer=self._renderer,
                notify=self._report_error,
                busy=self._busy,
            ),
        )
        _logger.info("Client started")
        return self

    async def teardown(self) -> None:
        self._debouncer.cancel()
        self._components = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def __aenter__(self) -> SfmClient:
        return await self.init()

    async def __aexit__(self, *exc: Any) -> None:
        await self.teardown()

    def _require(self) -> _Components:
        if self._components is None:
            raise SfmError("Client not initialized. Use 'async with SfmClient(...) as client:'")
        return self._components

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> ConfigResolver:
        return self._config

    @property
    def busy(self) -> BusyCounter:
        return self._busy

    @property
    def directory(self) -> DirectoryReconciler:
        return self._require().directory

    @property
    def planner(self) -> RoutePlanner:
        return self._require().planner

    @property
    def items(self) -> list[Place]:
        return self._require().directory.items

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected(self) -> Place | None:
        if self._selected_id is None:
            return None
        return self._require().directory.find(self._selected_id)

    @property
    def edit_mode(self) -> str:
        """``"none"``, ``"new"`` or ``"edit"``."""
        return self._edit_mode

    @property
    def log_level(self) -> str:
        return load_log_level(self._storage)

    def set_log_level(self, level: str) -> str:
        return save_log_level(self._storage, level)

    def save_config(self, patch: Mapping[str, Any]) -> SfmConfig:
        return self._config.save(patch)

    # ------------------------------------------------------------------
    # Boot
    # ------------------------------------------------------------------

    async def boot(self, *, prefer_local: bool = False, force_remote: bool = False) -> list[Place]:
        """Locate the user (mobile only), then run a reconciliation pass."""
        components = self._require()
        _logger.info("Booting directory")
        if is_mobile(self._user_agent):
            await self.locate_user()

        with self._busy.hold("正在加载数据..."):
            items = await components.directory.load(prefer_local=prefer_local, force_remote=force_remote)

        self._filter = dataclasses.replace(self._filter, city=default_city(items), category="")
        self.select(None)
        self._refresh_visible()
        return items

    async def locate_user(self) -> Coordinates | None:
        """Show the device position on the map; failures are only logged."""
        planner = self._require().planner
        try:
            position = await planner.current_position()
            if self._renderer is not None:
                self._renderer.show_user_position(position)
        except Exception as exc:
            _logger.warning("Automatic location failed: %s", exc)
            return None
        return position

    # ------------------------------------------------------------------
    # Selection and editor flows
    # ------------------------------------------------------------------

    def select(self, place_id: str | None) -> Place | None:
        """Select a place for editing (``None`` clears the selection)."""
        if place_id is None:
            self._selected_id = None
            self._edit_mode = "none"
            return None
        place = self._require().directory.find(place_id)
        if place is None:
            _logger.warning("Selected place not found: %s", place_id)
            return None
        self._selected_id = place.id
        self._edit_mode = "edit"
        if self._renderer is not None:
            self._renderer.focus(place)
        _logger.info("Focused place: %s %s", place.id, place.name)
        return place

    def start_new(self) -> None:
        self._selected_id = None
        self._edit_mode = "new"

    async def save(self, draft: PlaceDraft) -> Place:
        """Update the selected place, or create one when nothing is selected.

        Raises
        ------
        PlaceValidationError
            Before any remote call, when the draft is invalid.
        RemoteRequestError, ConfigurationMissingError, PlaceNotFoundError
            From the remote round trip; nothing local changes.
        """
        directory = self._require().directory
        try:
            fields = draft.to_fields()
        except PlaceValidationError as exc:
            _logger.warning("Save rejected: %s", exc)
            raise

        with self._busy.hold("正在保存…"):
            try:
                if self._selected_id is not None:
                    place = await directory.update(self._selected_id, fields)
                else:
                    new_row = {**fields, "id": new_place_id(), "updated_at": utcnow_iso()}
                    place = await directory.create(Place.from_row(new_row))
            except SfmError:
                _logger.error("Saving place failed", exc_info=True)
                raise

        self.select(place.id)
        return place

    async def delete_selected(self) -> None:
        directory = self._require().directory
        if self._selected_id is None:
            raise PlaceValidationError("no place selected")
        with self._busy.hold("正在删除…"):
            try:
                await directory.delete(self._selected_id)
            except SfmError:
                _logger.error("Deleting place failed", exc_info=True)
                raise
        self.select(None)

    async def relocate(self, draft: PlaceDraft) -> Coordinates:
        """Geocode the draft's ``"city address"``.

        With a selection the coordinates are written remotely and then
        mirrored locally; without one they are only returned so the form
        can be filled in before saving.
        """
        components = self._require()
        address = draft.full_address()
        if not address:
            raise PlaceValidationError("city or address required to locate")

        with self._busy.hold("正在定位…" if self._selected_id is None else "正在重新定位…"):
            try:
                coords = await components.geocoder.resolve(address)
                if self._selected_id is not None:
                    place = await components.directory.relocate(self._selected_id, coords)
                    if self._renderer is not None:
                        self._renderer.focus(place)
            except SfmError:
                _logger.error("Relocating place failed", exc_info=True)
                raise
        return coords

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def dispatch(
        self,
        place_id: str,
        mode: TravelMode | str = TravelMode.DRIVING,
    ) -> str | RouteResult | None:
        return await self._require().navigator.dispatch(place_id, mode)

    def _report_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)
        else:
            _logger.warning("User-facing error: %s", message)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    @property
    def filter(self) -> PlaceFilter:
        return self._filter

    @property
    def visible(self) -> list[Place]:
        return list(self._visible)

    def city_facets(self) -> list[tuple[str, int]]:
        return city_facets(self.items)

    def category_facets(self) -> list[tuple[str, int]]:
        return category_facets(self.items, self._filter.city)

    def update_filter(
        self,
        *,
        city: str | None = None,
        category: str | None = None,
        text: str | None = None,
    ) -> list[Place]:
        """Apply facet/text changes immediately.

        Changing the city resets the category unless one is given.
        """
        current = self._filter
        if city is not None and city != current.city and category is None:
            category = ""
        self._filter = PlaceFilter(
            city=current.city if city is None else city,
            category=current.category if category is None else category,
            text=current.text if text is None else text,
        )
        if text is not None:
            self._pending_text = text
            self._debouncer.cancel()
        return self._refresh_visible()

    def set_query(self, text: str) -> None:
        """Debounced free-text input (requires a running event loop)."""
        self._pending_text = text
        self._debouncer.trigger()

    def _apply_pending_text(self) -> None:
        self.update_filter(text=self._pending_text)

    def _refresh_visible(self) -> list[Place]:
        if self._components is None:
            return []
        self._visible = apply_filter(self._components.directory.items, self._filter)
        f = self._filter.normalized()
        _logger.debug("Filter applied: q=%r city=%r cat=%r count=%d", f.text, f.city, f.category, len(self._visible))
        if self._on_filter is not None:
            self._on_filter(self.visible)
        return self.visible

    def _handle_change(self, change: DirectoryChange) -> None:
        self._refresh_visible()
        if self._on_change is not None:
            self._on_change(change)
