from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Lock
import time
from typing import Callable

from .metrics import EXPIRED_URLS_TOTAL, REPORTS_TOTAL, TRACKED_URLS

logger = logging.getLogger("report_limiter.limiter")


@dataclass(frozen=True)
class LimitDecision:
    """Outcome of one report, read inside a single critical section."""

    url: str
    threshold: int
    limited: bool
    count: int

    @property
    def blocked(self) -> bool:
        return self.count >= self.threshold


class AccessLimiter:
    """Per-URL report counts with lazy TTL expiry.

    ``_last_access`` and ``_counts`` move together except after
    :meth:`clear_counts`, which drops counts only. Every access goes
    through ``_lock``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = Lock()
        self._last_access: dict[str, float] = {}
        self._counts: dict[str, int] = {}

    def should_limit(self, url: str, threshold: int, ttl_seconds: float) -> LimitDecision:
        with self._lock:
            now = self._clock()
            self._expire_stale(now, ttl_seconds)

            count = self._counts.get(url)
            if count is not None and count >= threshold:
                REPORTS_TOTAL.labels(outcome="limited").inc()
                logger.info(
                    "Rate limit exceeded for URL",
                    extra={"event": "limit_exceeded", "url": url, "count": count, "threshold": threshold},
                )
                return LimitDecision(url=url, threshold=threshold, limited=True, count=count)

            self._last_access[url] = now
            count = self._counts[url] = (count or 0) + 1
            TRACKED_URLS.set(len(self._last_access))
            REPORTS_TOTAL.labels(outcome="accepted").inc()
            logger.info(
                "Count incremented for URL",
                extra={"event": "count_incremented", "url": url, "count": count, "threshold": threshold},
            )
            return LimitDecision(url=url, threshold=threshold, limited=False, count=count)

    def _expire_stale(self, now: float, ttl_seconds: float) -> None:
        # Full scan on every call; callers hold the lock.
        stale = [url for url, seen in self._last_access.items() if now - seen > ttl_seconds]
        for url in stale:
            del self._last_access[url]
            self._counts.pop(url, None)
            logger.info("Expiring URL", extra={"event": "url_expired", "url": url})
        if stale:
            EXPIRED_URLS_TOTAL.inc(len(stale))
            TRACKED_URLS.set(len(self._last_access))

    def clear_counts(self) -> int:
        """Drop every count, keeping last-access times."""
        with self._lock:
            cleared = len(self._counts)
            self._counts.clear()
            return cleared

    def count_for(self, url: str) -> int | None:
        with self._lock:
            return self._counts.get(url)

    def last_access_for(self, url: str) -> float | None:
        with self._lock:
            return self._last_access.get(url)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_access)
