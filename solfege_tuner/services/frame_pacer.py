"""Display-refresh style tick pacing."""

from __future__ import annotations
import itertools
import queue
import time
from typing import Callable, Dict, Optional

from ..logger import get_logger
from ..core.interfaces import IFramePacer

logger = get_logger(__name__)


class RefreshPacer(IFramePacer):
    """Runs requested callbacks once per refresh on the calling thread.

    Like a browser's animation frame queue: a callback requested while a
    refresh is running fires on the following refresh, never the current
    one. Other threads must go through call_soon_threadsafe; everything
    else is meant to be called from the thread driving run().
    """

    def __init__(
        self,
        refresh_rate: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the pacer.

        Args:
            refresh_rate: Refreshes per second when driven by run()
            clock: Monotonic time source, passed to callbacks as the timestamp
            sleep: Sleep function used between refreshes
        """
        if refresh_rate <= 0:
            raise ValueError(f"refresh_rate must be positive, got {refresh_rate}")

        self._interval = 1.0 / refresh_rate
        self._clock = clock
        self._sleep = sleep

        self._handles = itertools.count(1)
        self._callbacks: Dict[int, Callable[[float], None]] = {}
        self._due: Dict[int, Callable[[float], None]] = {}
        self._calls: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()
        self._running = False

    def request_tick(self, callback: Callable[[float], None]) -> int:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        return handle

    def cancel_tick(self, handle: int) -> None:
        self._callbacks.pop(handle, None)
        self._due.pop(handle, None)

    def pending(self) -> int:
        """Number of callbacks waiting for the next refresh."""
        return len(self._callbacks)

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        """Queue a call from any thread to run at the start of the next refresh."""
        self._calls.put(callback)

    def run_once(self) -> int:
        """Perform one refresh.

        Returns:
            Number of tick callbacks invoked
        """
        while True:
            try:
                call = self._calls.get_nowait()
            except queue.Empty:
                break
            call()

        # Requests made by these callbacks wait for the next refresh
        self._due, self._callbacks = self._callbacks, {}
        timestamp = self._clock()
        fired = 0
        try:
            while self._due:
                handle = next(iter(self._due))
                callback = self._due.pop(handle)
                callback(timestamp)
                fired += 1
        finally:
            if self._due:
                self._callbacks.update(self._due)
                self._due = {}
        return fired

    def run(
        self,
        duration: Optional[float] = None,
        until: Optional[Callable[[], bool]] = None,
    ) -> None:
        """Refresh repeatedly until stopped, timed out, or the predicate holds.

        Args:
            duration: Maximum run time in seconds, or None for no limit
            until: Predicate checked before every refresh
        """
        self._running = True
        deadline = None if duration is None else self._clock() + duration
        logger.debug(f"Pacer running at {1.0 / self._interval:.1f} Hz")
        try:
            while self._running:
                if until is not None and until():
                    break
                frame_start = self._clock()
                if deadline is not None and frame_start >= deadline:
                    break
                self.run_once()
                remaining = self._interval - (self._clock() - frame_start)
                if remaining > 0:
                    self._sleep(remaining)
        finally:
            self._running = False

    def stop(self) -> None:
        """Make run() return after the current refresh."""
        self._running = False
