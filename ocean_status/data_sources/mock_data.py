"""Synthetic weather and tide data used when live providers are unavailable.

The generators have a fixed shape (diurnal sinusoids, an afternoon rain
window, alternating tides) but draw jitter from the supplied random source.
The output is intentionally non-reproducible mock data, not a simulation:
tests should assert bounds and shape, never exact values.
"""

from __future__ import annotations

import datetime as dt
import math
import random
from typing import List, Tuple
from zoneinfo import ZoneInfo

from ocean_status.domain import HourlyForecastPoint, TideEvent, TideHeight, TideType, WeatherSnapshot

# Weather shape, tuned to typical Caribbean trade-wind conditions.
BASE_WIND_SPEED = 3.0          # m/s, sinusoid spans 2-4
WIND_AMPLITUDE = 1.0
WIND_JITTER = 0.5
MIN_WIND_SPEED = 0.5
RAIN_WINDOW_HOURS = range(14, 19)  # local hours 14..18 inclusive
TRADE_WIND_DIRECTION = (110.0, 135.0)

# Tide shape.
TIDE_EVENT_COUNT = 16
TIDE_SPACING_HOURS = (5.5, 6.5)
HIGH_TIDE_BAND = (0.7, 1.2)
LOW_TIDE_BAND = (0.1, 0.5)
RAW_EVENT_FALLBACK_COUNT = 8
TIDE_HEIGHT_CENTER = 0.55
TIDE_HEIGHT_AMPLITUDE = 0.45
TIDE_PERIOD_HOURS = 12


def _diurnal(hour: int) -> float:
    """Sine of the hour's position in a 24-hour cycle."""
    return math.sin((hour / 24) * math.pi * 2)


def _clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value to [lower, upper]."""
    return max(lower, min(upper, value))


def synthesize_weather(
    now: dt.datetime,
    rng: random.Random,
    *,
    timezone: str = "UTC",
    hours: int = 24,
) -> Tuple[WeatherSnapshot, List[HourlyForecastPoint]]:
    """Return a plausible current snapshot and `hours` of hourly forecast starting at `now`."""
    local_hour = now.astimezone(ZoneInfo(timezone)).hour

    base_cloudiness = 40 + rng.random() * 30
    base_pressure = 1012 + rng.random() * 3
    base_humidity = 70 + rng.random() * 10
    base_wind_dir = rng.uniform(*TRADE_WIND_DIRECTION)

    hourly: List[HourlyForecastPoint] = []
    for i in range(hours):
        forecast_hour = (local_hour + i) % 24
        wind = BASE_WIND_SPEED + _diurnal(forecast_hour) * WIND_AMPLITUDE + rng.uniform(-WIND_JITTER, WIND_JITTER)
        temperature = 27 + _diurnal(forecast_hour) * 2 + (rng.random() - 0.5)
        rain = rng.random() * 0.3 if forecast_hour in RAIN_WINDOW_HOURS else 0.0
        hourly.append(
            HourlyForecastPoint(
                time=now + dt.timedelta(hours=i),
                wind_speed=round(max(MIN_WIND_SPEED, wind), 2),
                wind_direction=round((base_wind_dir + (rng.random() - 0.5) * 30) % 360),
                rain=round(rain, 2),
                cloudiness=_clamp(base_cloudiness + rng.random() * 10 - 5, 0, 100),
                temperature=round(temperature, 1),
                pressure=round(base_pressure + (rng.random() - 0.5) * 2),
                humidity=round(_clamp(base_humidity + (rng.random() - 0.5) * 10, 0, 100)),
            )
        )

    current_wind = BASE_WIND_SPEED + _diurnal(local_hour) * WIND_AMPLITUDE
    current_rain = rng.random() * 0.5 if local_hour in RAIN_WINDOW_HOURS else 0.0
    current = WeatherSnapshot(
        wind_speed=round(max(MIN_WIND_SPEED, current_wind), 2),
        wind_direction=round(base_wind_dir),
        cloudiness=_clamp(base_cloudiness, 0, 100),
        rain=round(current_rain, 2),
        temperature=round(27 + _diurnal(local_hour) * 2, 1),
        pressure=round(base_pressure),
        humidity=round(base_humidity),
        timestamp=now,
    )
    return current, hourly


def synthesize_tides(now: dt.datetime, rng: random.Random, *, count: int = TIDE_EVENT_COUNT) -> List[TideEvent]:
    """Return alternating high/low tides from a random phase, future events only.

    Falls back to the first raw events if filtering to the future leaves nothing.
    """
    is_high = rng.random() > 0.5
    current_time = now
    events: List[TideEvent] = []
    for _ in range(count):
        current_time = current_time + dt.timedelta(hours=rng.uniform(*TIDE_SPACING_HOURS))
        is_high = not is_high
        band = HIGH_TIDE_BAND if is_high else LOW_TIDE_BAND
        events.append(
            TideEvent(
                type=TideType.HIGH if is_high else TideType.LOW,
                height=round(rng.uniform(*band), 2),
                time=current_time,
            )
        )

    future = [e for e in events if e.time > now]
    return future or events[:RAW_EVENT_FALLBACK_COUNT]


def synthesize_tide_heights(now: dt.datetime, *, hours: int = 48) -> List[TideHeight]:
    """Return an hourly tide height series from a pure 12-hour sinusoid."""
    out: List[TideHeight] = []
    for hour in range(hours):
        cycle_position = (hour % TIDE_PERIOD_HOURS) / TIDE_PERIOD_HOURS
        height = TIDE_HEIGHT_CENTER + math.sin(cycle_position * math.pi * 2) * TIDE_HEIGHT_AMPLITUDE
        out.append(TideHeight(time=now + dt.timedelta(hours=hour), height=round(height, 2)))
    return out
