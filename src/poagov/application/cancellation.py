from __future__ import annotations
import asyncio, threading


class CancellationToken:
    """
    Set-once shutdown flag shared between a signal handler and the poll loop.

    Backed by a `threading.Event`, so `cancel()` is safe to call from a plain
    `signal.signal` handler or another thread, not only from the event loop.
    """

    def __init__(self, granularity: float = 0.05) -> None:
        self.granularity = granularity
        self._flag = threading.Event()

    def cancel(self) -> None:
        self._flag.set()

    @property
    def cancelled(self) -> bool:
        return self._flag.is_set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to `seconds`. Return True if the full time elapsed, False if cancelled first."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + seconds
        while not self._flag.is_set():
            remaining = deadline - loop.time()
            if remaining <= 0:
                return True
            await asyncio.sleep(min(self.granularity, remaining))
        return False
