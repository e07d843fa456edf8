"""Shared dataclasses and lightweight types used across modules."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from ocean_status.domain import AggregateResponse

# Wall-clock source returning timezone-aware datetimes; injected for tests.
NowFn = Callable[[], datetime]
# Monotonic seconds source used for cache ages.
MonotonicClock = Callable[[], float]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """AggregateResponse payload with the monotonic instant it was stored."""
    data: AggregateResponse
    stored_at: float
