"""Busy indicator bookkeeping and input debouncing."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterator

_logger = logging.getLogger(__name__)


class BusyCounter:
    """Reference-counted busy indicator.

    Overlapping actions each hold one reference; the indicator is visible
    while any reference is held.  ``on_change(visible, message)`` fires on
    every begin/end.
    """

    def __init__(self, on_change: Callable[[bool, str], None] | None = None) -> None:
        self._count = 0
        self._message = ""
        self._on_change = on_change

    @property
    def count(self) -> int:
        return self._count

    @property
    def visible(self) -> bool:
        return self._count > 0

    @property
    def message(self) -> str:
        return self._message

    def begin(self, message: str = "") -> None:
        self._count += 1
        if message:
            self._message = message
        self._notify()

    def end(self) -> None:
        self._count = max(0, self._count - 1)
        self._notify()

    @contextlib.contextmanager
    def hold(self, message: str = "") -> Iterator[None]:
        self.begin(message)
        try:
            yield
        finally:
            self.end()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.visible, self._message)
        except Exception:
            _logger.debug("Busy indicator callback failed", exc_info=True)


class Debouncer:
    """Run *callback* once input has been quiet for *delay* seconds."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """(Re)start the quiet period. Requires a running event loop."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run a pending callback now."""
        if self._handle is not None:
            self.cancel()
            self._callback()

    def _fire(self) -> None:
        self._handle = None
        self._callback()
