"""Retry delay computation shared by the request executor and delete poller.

Time, sleep and randomness are injected through :class:`RetryTiming` so tests can
drive retries deterministically without touching module globals.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

BACKOFF_BASE_S = 0.25
BACKOFF_MAX_S = 5.0
BACKOFF_FLOOR_S = 0.05
MAX_RETRY_AFTER_S = threading.TIMEOUT_MAX


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _sleep(seconds: float, cancel: threading.Event | None = None) -> None:
    if cancel is not None:
        cancel.wait(seconds)
        return
    time.sleep(seconds)


def parse_retry_after(value: str | None, now: datetime) -> float | None:
    """Return a positive delay in seconds from a ``Retry-After`` value, else None.

    Hints longer than the platform can wait on are treated as unparsable.
    """
    if not value or not value.strip():
        return None
    raw = value.strip()
    try:
        seconds = int(raw)
    except ValueError:
        pass
    else:
        return float(seconds) if 0 < seconds <= MAX_RETRY_AFTER_S else None

    try:
        retry_at = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if retry_at is None:
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    delta = (retry_at - now).total_seconds()
    return delta if 0 < delta <= MAX_RETRY_AFTER_S else None


def backoff_seconds(attempt: int, rand: Callable[[], float] = random.random) -> float:
    """Exponential backoff with jitter in [0.5, 1.5), kept within [0.05, 5] seconds."""
    exponent = max(0, attempt - 1)
    delay = BACKOFF_MAX_S if exponent >= 16 else min(BACKOFF_MAX_S, BACKOFF_BASE_S * (2**exponent))
    delay = min(BACKOFF_MAX_S, delay * (0.5 + rand()))
    return max(BACKOFF_FLOOR_S, delay)


@dataclass(frozen=True)
class RetryTiming:
    clock: Callable[[], datetime] = _utc_now
    sleep: Callable[[float, threading.Event | None], None] = _sleep
    rand: Callable[[], float] = random.random

    def delay(
        self,
        attempt: int,
        retry_after: str | None = None,
        cancel: threading.Event | None = None,
    ) -> tuple[float, bool]:
        if cancel is not None and cancel.is_set():
            return 0.0, False
        if retry_after:
            hinted = parse_retry_after(retry_after, self.clock())
            if hinted is not None:
                return hinted, True
        return backoff_seconds(attempt, self.rand), True
