from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol


class Timer(Protocol):
    def arm(self, delay_seconds: float, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class LoopTimer:
    """One-shot timers on an asyncio event loop.

    Without an explicit loop the running loop is used, so ``arm`` has to be
    called from inside the loop (a lifespan hook or a route handler).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def arm(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        # cancelling a handle that already fired is a no-op
        handle.cancel()
