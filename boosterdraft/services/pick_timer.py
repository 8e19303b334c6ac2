"""Cancelable per-pick countdown on the running asyncio loop."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PickTimer:
    """
    Calls on_expire once if no pick arrives within the time budget.

    A budget of 0 disables the timer. start() and restart() must be called
    from inside a running event loop.
    """

    def __init__(self, seconds: float, on_expire: Callable[[], None]) -> None:
        self.seconds = seconds
        self._on_expire = on_expire
        self._handle: asyncio.TimerHandle | None = None
        self._deadline: float | None = None

    @property
    def enabled(self) -> bool:
        return self.seconds > 0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def remaining(self) -> float | None:
        """Seconds left on the current countdown, None if not running."""
        if self._handle is None or self._deadline is None:
            return None
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    def start(self) -> None:
        if not self.enabled:
            return
        self.cancel()
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.seconds
        self._handle = loop.call_later(self.seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._deadline = None

    def restart(self) -> None:
        self.start()

    def _fire(self) -> None:
        self._handle = None
        self._deadline = None
        logger.debug("Pick timer expired after %ss", self.seconds)
        self._on_expire()
