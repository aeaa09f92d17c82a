"""
judit_proxy/orchestrator/deadline.py

A wall-clock budget for one polling loop.

The PollOrchestrator creates one Deadline per loop (main and grace) and
asks it two things only: "is there time left?" and "wait before the next
iteration". The wait never extends past the budget, so a loop whose
deadline expires mid-sleep simply does not re-enter.

Clock and sleeper are injectable so tests can drive time explicitly.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]
Sleeper = Callable[[float], None]


class Deadline:
    def __init__(
        self,
        budget_ms: int,
        *,
        clock: Clock = time.monotonic,
        sleeper: Sleeper = time.sleep,
    ) -> None:
        self.budget_ms = max(0, int(budget_ms))
        self._clock = clock
        self._sleeper = sleeper
        self._started_at = clock()

    @property
    def elapsed_ms(self) -> int:
        return int((self._clock() - self._started_at) * 1000)

    @property
    def remaining_ms(self) -> int:
        return max(0, self.budget_ms - self.elapsed_ms)

    def expired(self) -> bool:
        return self.elapsed_ms >= self.budget_ms

    def sleep(self, interval_ms: int) -> bool:
        """
        Suspend for `interval_ms`, cut short at the deadline.

        Returns True when there is still budget left afterwards.
        """
        wait_ms = min(max(0, int(interval_ms)), self.remaining_ms)
        if wait_ms > 0:
            self._sleeper(wait_ms / 1000)
        return not self.expired()
