"""Deterministic condition primitives shared by the activity rules.

Each primitive maps one measure (wind, clouds, rain, tide timing) against an
activity threshold onto a tri-level ActivityStatus plus a continuous severity
score. Activity-specific precedence lives in activity_rules.py; nothing here
knows about individual activities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from ocean_status.domain import (
    ActivityStatus,
    ActivityThresholds,
    HourlyForecastPoint,
    TideEvent,
    TideType,
    WeatherSnapshot,
)

WIND_GOOD_RATIO = 0.7
CLOUD_GOOD_RATIO = 0.6   # clouds are a softer signal than wind
RAIN_CAUTION_RATIO = 0.5

CURRENT_TIDE_LOOKBACK = timedelta(hours=3)
IMMINENT_TIDE = timedelta(hours=2)
MIN_WINDOW_HOURS = 4


@dataclass(frozen=True)
class Evaluation:
    """Status of a single measure plus how far into its band it sits."""
    status: ActivityStatus
    severity: float = 0.0


@dataclass(frozen=True)
class TideEvaluation:
    """Tide-timing status plus the next preferred tide, used for narration."""
    status: ActivityStatus
    next_preferred: TideEvent | None = None


@dataclass
class RuleContext:
    """Everything an activity evaluator may look at for one region and instant."""
    weather: WeatherSnapshot
    tides: List[TideEvent]
    thresholds: ActivityThresholds
    now: datetime
    hourly_forecast: List[HourlyForecastPoint] = field(default_factory=list)
    timezone: str = "UTC"  # IANA zone used when narrating clock times


def evaluate_wind(wind_speed: float, max_wind_speed: float) -> Evaluation:
    """Good up to 70% of the limit, caution up to the limit, bad beyond it."""
    good_limit = max_wind_speed * WIND_GOOD_RATIO
    if wind_speed <= good_limit:
        return Evaluation(ActivityStatus.GOOD, 0.0)
    if wind_speed <= max_wind_speed:
        return Evaluation(ActivityStatus.CAUTION, (wind_speed - good_limit) / (max_wind_speed - good_limit))
    return Evaluation(ActivityStatus.BAD, (wind_speed - max_wind_speed) / max_wind_speed)


def evaluate_cloudiness(cloudiness: float, max_cloudiness: float) -> Evaluation:
    """Good up to 60% of the limit, caution up to the limit, bad beyond it."""
    good_limit = max_cloudiness * CLOUD_GOOD_RATIO
    if cloudiness <= good_limit:
        return Evaluation(ActivityStatus.GOOD, 0.0)
    if cloudiness <= max_cloudiness:
        return Evaluation(ActivityStatus.CAUTION, (cloudiness - good_limit) / (max_cloudiness - good_limit))
    return Evaluation(ActivityStatus.BAD, (cloudiness - max_cloudiness) / max_cloudiness)


def evaluate_rain(rain: float, max_rain: float) -> Evaluation:
    """Good only when dry, caution up to half the limit, bad beyond that."""
    if rain == 0:
        return Evaluation(ActivityStatus.GOOD, 0.0)
    caution_limit = max_rain * RAIN_CAUTION_RATIO
    if rain <= caution_limit:
        return Evaluation(ActivityStatus.CAUTION, rain / caution_limit)
    return Evaluation(ActivityStatus.BAD, rain / max_rain)


def find_current_tide(tides: Sequence[TideEvent], now: datetime) -> TideEvent | None:
    """Latest tide at or before `now` that is no older than three hours."""
    current: TideEvent | None = None
    for tide in tides:
        if now - CURRENT_TIDE_LOOKBACK < tide.time <= now:
            if current is None or tide.time > current.time:
                current = tide
    return current


def find_next_tide(tides: Sequence[TideEvent], now: datetime, tide_type: TideType | None = None) -> TideEvent | None:
    """Earliest tide strictly after `now`, optionally of one type."""
    upcoming = [t for t in tides if t.time > now and (tide_type is None or t.type == tide_type)]
    return min(upcoming, key=lambda t: t.time, default=None)


def evaluate_tide(tides: Sequence[TideEvent], preferred_tide: TideType | None, now: datetime) -> TideEvaluation:
    """Judge tide timing against a preference.

    - no preference: good
    - preferred tide within the last three hours: good
    - next preferred tide two hours away or less: caution
    - next preferred tide further out: bad
    - no upcoming preferred tide known: caution
    """
    if preferred_tide is None:
        return TideEvaluation(ActivityStatus.GOOD)

    next_preferred = find_next_tide(tides, now, preferred_tide)
    recent_preferred = any(
        t.type == preferred_tide and now - CURRENT_TIDE_LOOKBACK < t.time <= now for t in tides
    )

    if recent_preferred:
        return TideEvaluation(ActivityStatus.GOOD, next_preferred)

    if next_preferred is not None:
        if next_preferred.time - now <= IMMINENT_TIDE:
            return TideEvaluation(ActivityStatus.CAUTION, next_preferred)
        return TideEvaluation(ActivityStatus.BAD, next_preferred)

    return TideEvaluation(ActivityStatus.CAUTION)


def combine_statuses(evaluations: Iterable[Evaluation]) -> ActivityStatus:
    """Any bad component forces bad; otherwise any caution gives caution; else good."""
    statuses = {e.status for e in evaluations}
    if ActivityStatus.BAD in statuses:
        return ActivityStatus.BAD
    if ActivityStatus.CAUTION in statuses:
        return ActivityStatus.CAUTION
    return ActivityStatus.GOOD


def calculate_window(
    hourly_forecast: Sequence[HourlyForecastPoint] | None,
    thresholds: ActivityThresholds,
    start_hours: int = 0,
    max_hours: int = 8,
) -> str | None:
    """
    Narrate how long conditions stay usable, starting `start_hours` into the forecast.

    Counts consecutive hours where wind, clouds and rain are all non-bad and stops
    at the first bad hour. Fewer than four usable hours yields no window.
    """
    if not hourly_forecast:
        return None

    usable_hours = 0
    for hour in hourly_forecast[start_hours : start_hours + max_hours]:
        hour_status = combine_statuses(
            (
                evaluate_wind(hour.wind_speed, thresholds.max_wind_speed),
                evaluate_cloudiness(hour.cloudiness, thresholds.max_cloudiness),
                evaluate_rain(hour.rain, thresholds.max_rain),
            )
        )
        if hour_status == ActivityStatus.BAD:
            break
        usable_hours += 1

    if usable_hours >= MIN_WINDOW_HOURS:
        return f"Next {usable_hours}-{usable_hours + 2} hours"
    return None
