"""Single-shot device geolocation.

The positioning SDK reports through a callback ``(status, result)``; this
module turns that into one awaitable that resolves exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from sfmap.exceptions import LocationError
from sfmap.models.route import Coordinates, PositionOptions

_logger = logging.getLogger(__name__)

COMPLETE_STATUS = "complete"

PositionCallback = Callable[[str, Mapping[str, Any] | None], None]


class GeolocationProvider(Protocol):
    """Callback-style positioning SDK handle.

    Implementations call *callback* once with ``("complete", {"position":
    {"lng": .., "lat": ..}, ...})`` on success, or any other status plus a
    result carrying ``message``/``info`` on failure.
    """

    def get_current_position(self, callback: PositionCallback) -> None:
        ...


GeolocationFactory = Callable[[PositionOptions], GeolocationProvider]


def _failure_reason(result: Mapping[str, Any] | None) -> str:
    if isinstance(result, Mapping):
        reason = result.get("message") or result.get("info")
        if reason:
            return str(reason)
    return "geolocation failed"


def _position(result: Mapping[str, Any] | None) -> Coordinates | None:
    if not isinstance(result, Mapping):
        return None
    position = result.get("position")
    if not isinstance(position, Mapping):
        return None
    try:
        return Coordinates(lng=float(position["lng"]), lat=float(position["lat"]), raw=dict(result))
    except (KeyError, TypeError, ValueError):
        return None


class DeviceLocator:
    """Wraps a positioning SDK.

    The provider is created lazily from the first call's options and reused
    afterwards.  A ``None`` factory means the SDK is not loaded.
    """

    def __init__(self, factory: GeolocationFactory | None) -> None:
        self._factory = factory
        self._provider: GeolocationProvider | None = None

    @property
    def available(self) -> bool:
        return self._factory is not None

    async def current_position(self, options: PositionOptions | None = None) -> Coordinates:
        """Resolve the device position.

        Raises
        ------
        LocationError
            SDK unavailable, or any status other than ``"complete"``; the
            provider's reason is preserved verbatim.
        """
        if self._factory is None:
            raise LocationError("amap not ready")
        if self._provider is None:
            try:
                self._provider = self._factory(options or PositionOptions())
            except Exception as exc:
                raise LocationError(str(exc) or "geolocation unavailable") from exc

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Coordinates] = loop.create_future()

        def _settle(status: str, result: Mapping[str, Any] | None) -> None:
            if future.done():
                return
            coords = _position(result) if status == COMPLETE_STATUS else None
            if coords is not None:
                future.set_result(coords)
            else:
                future.set_exception(LocationError(_failure_reason(result)))

        def _callback(status: str, result: Mapping[str, Any] | None) -> None:
            # The SDK may report from another thread.
            loop.call_soon_threadsafe(_settle, status, result)

        try:
            self._provider.get_current_position(_callback)
        except Exception as exc:
            raise LocationError(str(exc) or "geolocation failed") from exc

        coords = await future
        _logger.debug("Device position: %s", coords.as_param())
        return coords
