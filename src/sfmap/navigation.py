"""Navigation dispatch: hand off to the native map app, or plan and draw a route."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from sfmap.busy import BusyCounter
from sfmap.directory.reconciler import DirectoryReconciler
from sfmap.handoff import build_handoff_uri
from sfmap.messages import localize_error
from sfmap.models.place import Place
from sfmap.models.route import Coordinates, Platform, RouteResult, TravelMode
from sfmap.routing import RoutePlanner

_logger = logging.getLogger(__name__)


class RouteRenderer(Protocol):
    """Map-layer hooks; implemented by the view."""

    def draw_route(self, points: Sequence[tuple[float, float]]) -> None:
        ...

    def focus(self, place: Place) -> None:
        ...

    def show_user_position(self, position: Coordinates) -> None:
        ...


def _log_only(message: str) -> None:
    _logger.warning("Unreported navigation error: %s", message)


class Navigator:
    """Dispatch a navigation request for a place in the directory.

    Parameters
    ----------
    directory : DirectoryReconciler
        Source of place lookups.
    planner : RoutePlanner
        Used on non-mobile platforms.
    platform : Platform
        Device family from :func:`~sfmap.handoff.detect_platform`.
    launcher : callable
        Page-level navigation to a hand-off URI.
    renderer : RouteRenderer or None
        Receives the decoded route; ``None`` when no map is available.
    notify : callable
        Shows a localized, user-facing error message.
    """

    def __init__(
        self,
        directory: DirectoryReconciler,
        planner: RoutePlanner,
        *,
        platform: Platform = Platform.OTHER,
        launcher: Callable[[str], None] | None = None,
        renderer: RouteRenderer | None = None,
        notify: Callable[[str], None] | None = None,
        busy: BusyCounter | None = None,
    ) -> None:
        self._directory = directory
        self._planner = planner
        self._platform = platform
        self._launcher = launcher
        self._renderer = renderer
        self._notify = notify or _log_only
        self._busy = busy if busy is not None else BusyCounter()

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def hands_off(self) -> bool:
        """Whether dispatch opens the native app instead of drawing in-app."""
        return self._platform in (Platform.IOS, Platform.ANDROID)

    async def dispatch(
        self,
        place_id: str,
        mode: TravelMode | str = TravelMode.DRIVING,
    ) -> str | RouteResult | None:
        """Navigate to the place with *place_id*.

        Returns the launched URI (mobile), the drawn route (desktop), or
        ``None`` when the place is unknown or the attempt failed.  Failures
        are reported through ``notify``, never raised.
        """
        place = self._directory.find(place_id)
        if place is None:
            _logger.warning("Navigation target not found: %s", place_id)
            return None
        travel_mode = TravelMode.coerce(mode)

        if self.hands_off:
            return self._hand_off(place, travel_mode)
        return await self._plan_and_draw(place, travel_mode)

    def _hand_off(self, place: Place, mode: TravelMode) -> str | None:
        try:
            uri = build_handoff_uri(place, mode, self._platform)
            if self._launcher is None:
                raise RuntimeError("amap not ready")
            self._launcher(uri)
        except Exception as exc:
            _logger.error("Failed to open AMap app", exc_info=True)
            self._notify(f"打开高德失败：{localize_error(exc)}")
            return None
        _logger.info("Handed off to AMap (%s): %s", self._platform, place.id)
        return uri

    async def _plan_and_draw(self, place: Place, mode: TravelMode) -> RouteResult | None:
        try:
            with self._busy.hold("正在规划路线…"):
                result = await self._planner.plan_route(place, mode)
            if self._renderer is not None:
                self._renderer.draw_route(result.points)
                self._renderer.focus(place)
        except Exception as exc:
            _logger.error("Route planning failed", exc_info=True)
            self._notify(f"路线规划失败：{localize_error(exc)}")
            return None
        return result
