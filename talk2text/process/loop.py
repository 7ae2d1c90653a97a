"""Callback queue drained by the main thread.

Watcher threads never touch session state. They post callables here and the
thread running the loop executes them one at a time, so every state
transition happens on a single thread of control.
"""

import queue
import time
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CallbackLoop:
    """Thread-safe FIFO of pending callbacks."""

    def __init__(self):
        self._queue: "queue.Queue[tuple]" = queue.Queue()

    def call_soon(self, callback: Callable, *args) -> None:
        """Schedule callback(*args). Safe to call from any thread."""
        self._queue.put((callback, args))

    def pending(self) -> int:
        return self._queue.qsize()

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """Run queued callbacks.

        Blocks up to `timeout` seconds for the first callback when the queue is
        empty (None waits forever, 0 does not wait), then drains whatever else
        is queued without blocking.

        Returns:
            Number of callbacks executed
        """
        executed = 0
        block = timeout is None or timeout > 0
        try:
            callback, args = self._queue.get(block=block, timeout=timeout if block else None)
        except queue.Empty:
            return 0

        while True:
            callback(*args)
            executed += 1
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return executed

    def run_until(self, predicate: Callable[[], bool], timeout: Optional[float] = None,
                  poll_interval: float = 0.1) -> bool:
        """Run callbacks until predicate() is true.

        Returns:
            True if the predicate became true, False on timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not predicate():
            wait = poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                wait = min(wait, remaining)
            self.run_pending(timeout=wait)
        return True
