from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """
    Tracks consecutive reputation-lookup failures and opens after ``threshold``
    of them, so the resolver skips the external service for ``cooldown_seconds``
    and goes straight to its local fallback.

    The breaker closes again on its own once the cooldown has elapsed. It has
    no dependencies on other project modules.
    """

    def __init__(
        self,
        threshold: int,
        cooldown_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._threshold = threshold
        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._consecutive_failures: int = 0
        self._open_at: Optional[float] = None

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        """
        True while lookups should be skipped.

        Reading this after the cooldown has elapsed closes the breaker and
        lets the next lookup through.
        """
        if self._open_at is None:
            return False
        if self._clock() - self._open_at >= self._cooldown_seconds:
            self._open_at = None
            self._consecutive_failures = 0
            logger.info("Reputation circuit closed, resuming external lookups")
            return False
        return True

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def open_at(self) -> Optional[float]:
        return self._open_at

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def record_failure(self) -> None:
        self._consecutive_failures += 1
        if self._consecutive_failures >= self._threshold and self._open_at is None:
            self._open_at = self._clock()
            logger.warning(
                "Reputation circuit opened after %d consecutive lookup failures; "
                "using local fallback for %.0fs",
                self._consecutive_failures,
                self._cooldown_seconds,
            )

    def record_success(self) -> None:
        self._consecutive_failures = 0
