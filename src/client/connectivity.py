"""Connectivity tracking for the chat client.

Fires a callback on every offline -> online transition, the trigger for
replaying the offline write queue.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """Tracks whether the API is reachable.

    Args:
        probe: Returns True when the API answers.
        on_online: Awaited once per offline -> online transition.
        interval: Seconds between probes in `run()`.
        online: Initial state.
    """

    def __init__(
        self,
        probe: Callable[[], Awaitable[bool]],
        on_online: Callable[[], Awaitable[object]],
        interval: float = 5.0,
        online: bool = True,
    ) -> None:
        self._probe = probe
        self._on_online = on_online
        self.interval = interval
        self.online = online
        self._stopped = asyncio.Event()

    async def set_online(self, online: bool) -> None:
        """Record the current state, firing on_online on a transition."""
        was_online = self.online
        self.online = online
        if online and not was_online:
            logger.info("Connection restored")
            await self._on_online()
        elif was_online and not online:
            logger.info("Connection lost")

    async def check(self) -> bool:
        """Probe once and update the state."""
        await self.set_online(await self._probe())
        return self.online

    async def run(self) -> None:
        """Probe every `interval` seconds until `stop()` is called."""
        self._stopped.clear()
        while not self._stopped.is_set():
            await self.check()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except TimeoutError:
                pass

    def stop(self) -> None:
        self._stopped.set()
