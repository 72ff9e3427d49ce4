"""Refresh cadence for dashboard widgets."""

import logging
import time
from typing import Any, Callable, Optional

from client.cache import CONCERTS, SPORTS, DataCache
from services.sports_service import any_live

logger = logging.getLogger(__name__)

SPORTS_LIVE_INTERVAL = 15.0
SPORTS_IDLE_INTERVAL = 120.0
CALENDAR_INTERVAL = 300.0
MESSAGES_INTERVAL = 5.0
# Concerts refresh on cache expiry; failed attempts wait this long before retrying.
CONCERTS_RETRY_INTERVAL = 300.0

SPORTS_TASK = "sports"
CALENDAR_TASK = "calendar"
CONCERTS_TASK = "concerts"
MESSAGES_TASK = "messages"


class RefreshScheduler:
    """Decides which widget refreshes are due and runs them.

    Tasks are plain callables registered by name.  The clock and sleep
    function are injectable so the loop can be driven in tests.
    """

    def __init__(self, cache: DataCache, clock: Callable[[], float] = time.monotonic):
        self._cache = cache
        self._clock = clock
        self._tasks: dict[str, Callable[[], Any]] = {}
        self._last_run: dict[str, float] = {}

    def register(self, name: str, task: Callable[[], Any]) -> None:
        self._tasks[name] = task

    def sports_interval(self) -> float:
        """Fast cadence while any cached team has a live game."""
        teams = (self._cache.get(SPORTS) or {}).get("teams") or []
        return SPORTS_LIVE_INTERVAL if any_live(teams) else SPORTS_IDLE_INTERVAL

    def interval(self, name: str) -> Optional[float]:
        if name == SPORTS_TASK:
            return self.sports_interval()
        if name == CALENDAR_TASK:
            return CALENDAR_INTERVAL
        if name == MESSAGES_TASK:
            return MESSAGES_INTERVAL
        return None

    def is_due(self, name: str, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        last = self._last_run.get(name)
        if name == CONCERTS_TASK:
            if self._cache.is_fresh(CONCERTS):
                return False
            return last is None or now - last >= CONCERTS_RETRY_INTERVAL
        if last is None:
            return True
        interval = self.interval(name)
        return interval is not None and now - last >= interval

    def due(self, now: Optional[float] = None) -> list[str]:
        now = self._clock() if now is None else now
        return [name for name in self._tasks if self.is_due(name, now)]

    def mark(self, name: str, now: Optional[float] = None) -> None:
        self._last_run[name] = self._clock() if now is None else now

    def run_due(self, now: Optional[float] = None) -> list[str]:
        """Run every due task once.  A failing task is logged and retried on schedule."""
        now = self._clock() if now is None else now
        ran = []
        for name in self.due(now):
            try:
                self._tasks[name]()
            except Exception:
                logger.warning("Refresh task %s failed", name, exc_info=True)
            self.mark(name, now)
            ran.append(name)
        return ran

    def run(
        self,
        iterations: Optional[int] = None,
        tick: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Poll for due tasks every ``tick`` seconds (forever when ``iterations`` is None)."""
        count = 0
        while iterations is None or count < iterations:
            self.run_due()
            count += 1
            sleep(tick)
