from __future__ import annotations

import bisect
import threading
from collections import defaultdict, deque
from typing import Deque, Dict


class TrafficWindowTracker:
    """
    Per-address sliding window of hit timestamps with a burst threshold.

    Each window is kept sorted so a late-arriving older hit from a concurrent
    producer still ages out in order. Stale timestamps are evicted lazily on
    every access to an address. The evict/insert/compare sequence runs under
    a lock and never awaits, so two concurrent events from the same address
    cannot lose an update whether the callers are asyncio tasks or threads.

    Addresses that go permanently quiet are only removed by ``reap_idle``,
    which the pipeline's maintenance loop calls periodically.
    """

    def __init__(self, window_seconds: float, spike_threshold: int) -> None:
        self._window_seconds = window_seconds
        self._spike_threshold = spike_threshold
        self._windows: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def spike_threshold(self) -> int:
        return self._spike_threshold

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, address: object) -> bool:
        return address in self._windows

    def _evict(self, window: Deque[float], now: float) -> None:
        cutoff = now - self._window_seconds
        while window and window[0] < cutoff:
            window.popleft()

    @staticmethod
    def _count(window: Deque[float], now: float) -> int:
        # hits recorded after a late event are outside its window
        if not window or window[-1] <= now:
            return len(window)
        return bisect.bisect_right(window, now)

    def record_and_check(self, address: str, now: float) -> bool:
        """Record a hit for ``address`` at ``now``; True when it is spiking."""
        with self._lock:
            window = self._windows[address]
            self._evict(window, now)
            if not window or window[-1] <= now:
                window.append(now)
            else:
                bisect.insort(window, now)
            return self._count(window, now) > self._spike_threshold

    def hits(self, address: str, now: float) -> int:
        """Number of hits from ``address`` inside the window ending at ``now``."""
        with self._lock:
            window = self._windows.get(address)
            if window is None:
                return 0
            self._evict(window, now)
            return self._count(window, now)

    def reap_idle(self, now: float, idle_seconds: float) -> int:
        """
        Drop addresses whose most recent hit is older than ``idle_seconds``.

        Returns the number of addresses removed.
        """
        cutoff = now - idle_seconds
        with self._lock:
            idle = [
                address for address, window in self._windows.items()
                if not window or window[-1] < cutoff
            ]
            for address in idle:
                del self._windows[address]
        return len(idle)
