"""Route planning between the device (or an explicit origin) and a place."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from sfmap._api import direction as _direction_api
from sfmap._api.geocode import provider_info
from sfmap._redact import redact_for_log, redact_url
from sfmap._transport import Transport
from sfmap.config import SfmConfig
from sfmap.exceptions import PlanningError, SfmTransportError
from sfmap.geolocation import DeviceLocator
from sfmap.models.place import Place
from sfmap.models.route import Coordinates, PositionOptions, RouteResult, TravelMode

_logger = logging.getLogger(__name__)

parse_polyline = _direction_api.parse_polyline
extract_route_points = _direction_api.extract_route_points


class RoutePlanner:
    """Plan driving/walking routes through the AMap direction service."""

    def __init__(
        self,
        config: Callable[[], SfmConfig],
        transport: Transport,
        locator: DeviceLocator,
    ) -> None:
        self._config = config
        self._transport = transport
        self._locator = locator

    async def current_position(self, options: PositionOptions | None = None) -> Coordinates:
        """Single-shot device position (see :class:`~sfmap.geolocation.DeviceLocator`)."""
        return await self._locator.current_position(options)

    async def plan_route(
        self,
        destination: Place,
        mode: TravelMode | str = TravelMode.DRIVING,
        origin: Coordinates | None = None,
    ) -> RouteResult:
        """Plan a route to *destination*.

        Parameters
        ----------
        destination : Place
            Must have both coordinates; checked before any I/O.
        mode : TravelMode
            ``driving`` (default) or ``walking``.
        origin : Coordinates or None
            Start point; the device position is used when omitted.

        Raises
        ------
        PlanningError
            Missing destination coordinates, missing REST key, transport
            failure or a provider-reported failure (carrying its info code).
        LocationError
            The device position could not be determined.
        """
        if destination.lng is None or destination.lat is None:
            raise PlanningError("missing destination coordinates")
        travel_mode = TravelMode.coerce(mode)
        to_point = Coordinates(lng=destination.lng, lat=destination.lat)

        from_point = origin if origin is not None else await self.current_position()

        rest_key = self._config().amap_rest_key.strip()
        if not rest_key:
            raise PlanningError("missing rest key")

        url = _direction_api.build_direction_url(rest_key, from_point, to_point, travel_mode)
        _logger.debug("Planning %s route via %s", travel_mode, redact_url(url))
        try:
            response = await self._transport.request("GET", url)
        except SfmTransportError as exc:
            raise PlanningError(f"route request failed: {exc}") from exc

        try:
            data = response.json()
        except json.JSONDecodeError:
            data = {}

        if _direction_api.is_success(data):
            points = _direction_api.extract_route_points(data)
            _logger.info("Route planned: mode=%s points=%d", travel_mode, len(points))
            return RouteResult(
                from_point=from_point,
                to_point=to_point,
                mode=travel_mode,
                points=points,
                raw=data,
                url=redact_url(url),
            )

        info = provider_info(data)
        extra = {
            "mode": str(travel_mode),
            "origin": [from_point.lng, from_point.lat],
            "destination": [to_point.lng, to_point.lat],
            "info": info or None,
            "raw": redact_for_log(data) if data else None,
        }
        _logger.error("Route planning failed (details): %s", json.dumps(extra, ensure_ascii=False))
        raise PlanningError(info or "route planning failed", info=info)
