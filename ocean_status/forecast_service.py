"""Fetch weather and tides for a region, merge them, and evaluate every activity."""
from __future__ import annotations

import datetime as dt
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Sequence

from ocean_status.activity_rules import evaluate_all
from ocean_status.app_types import NowFn, utc_now
from ocean_status.assessment_engine import find_current_tide, find_next_tide
from ocean_status.data_sources.base import TidesResult, TidesSource, WeatherResult, WeatherSource
from ocean_status.domain import (
    AggregateResponse,
    CurrentConditions,
    HourlyForecastPoint,
    ProviderError,
    RegionConfig,
    TideHeight,
    WeatherSnapshot,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_service")

TIDE_MATCH_TOLERANCE = dt.timedelta(minutes=30)
BACKFILL_MAX_OFFSET = dt.timedelta(hours=1)
BACKFILL_FIELDS = ("wind_speed", "wind_direction", "cloudiness", "rain", "temperature", "pressure", "humidity")


class OceanStatusError(RuntimeError):
    """Internal failure while assembling a region status."""


def merge_tide_heights(
    hourly: Sequence[HourlyForecastPoint],
    heights: Sequence[TideHeight] | None,
) -> List[HourlyForecastPoint]:
    """
    Attach the nearest tide height to each forecast hour.

    A height is attached (rounded to centimetres) only when the closest sample
    lies within 30 minutes of the hour; other hours are returned unchanged.
    """
    if not hourly or not heights:
        return list(hourly)

    merged: List[HourlyForecastPoint] = []
    for hour in hourly:
        closest = min(heights, key=lambda h: abs(h.time - hour.time))
        if abs(closest.time - hour.time) <= TIDE_MATCH_TOLERANCE:
            hour = hour.model_copy(update={"tide_height": round(closest.height, 2)})
        merged.append(hour)
    return merged


def backfill_current_weather(
    current: WeatherSnapshot,
    hourly: Sequence[HourlyForecastPoint],
    now: dt.datetime,
) -> WeatherSnapshot:
    """
    Replace a zero-wind current reading with the first forecast hour.

    Upstream sometimes reports exactly 0 m/s while the forecast is populated;
    the first hour is used only when it has wind and lies within an hour of now.
    """
    if current.wind_speed != 0 or not hourly:
        return current
    first = hourly[0]
    if first.wind_speed <= 0 or abs(first.time - now) > BACKFILL_MAX_OFFSET:
        return current

    update = {name: getattr(first, name) for name in BACKFILL_FIELDS if getattr(first, name) is not None}
    logger.debug("Backfilled zero-wind current weather from first forecast hour", extra={"fields": sorted(update)})
    return current.model_copy(update=update)


class OceanStatusService:
    """Orchestrates one status computation per call; holds no per-region state."""

    def __init__(
        self,
        weather_source: WeatherSource,
        tides_source: TidesSource,
        *,
        tide_days: int = 3,
        fetch_timeout_seconds: float = 20.0,
        now_fn: NowFn = utc_now,
    ) -> None:
        self.weather_source = weather_source
        self.tides_source = tides_source
        self.tide_days = tide_days
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.now_fn = now_fn

    def _fetch_both(self, region: RegionConfig) -> tuple[WeatherResult, TidesResult]:
        """
        Run both fetches concurrently under one shared deadline.

        A fetch that raises, or is still running when the deadline passes,
        degrades to its source's fallback; the other fetch is unaffected.
        """
        lat, lon = region.coordinates.latitude, region.coordinates.longitude
        pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="ocean-fetch")
        try:
            weather_future = pool.submit(self.weather_source.fetch_weather, lat, lon, timezone=region.timezone)
            tides_future = pool.submit(self.tides_source.fetch_tides, lat, lon, self.tide_days)
            finished, _ = wait((weather_future, tides_future), timeout=self.fetch_timeout_seconds)

            weather = self._collect(
                weather_future if weather_future in finished else None,
                "Weather",
                region,
                lambda message: self.weather_source.fallback(message, timezone=region.timezone),
            )
            tides = self._collect(
                tides_future if tides_future in finished else None,
                "Tides",
                region,
                self.tides_source.fallback,
            )
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
        return weather, tides

    def _collect(self, future: Future | None, label: str, region: RegionConfig, fallback: Callable[[str], Any]) -> Any:
        """Result of a finished fetch, or the fallback when it missed the deadline (None) or raised."""
        if future is None:
            message = f"{label} fetch exceeded {self.fetch_timeout_seconds:g}s"
            logger.error(message, extra={"region": region.id})
            return fallback(message)
        try:
            return future.result()
        except Exception as exc:
            logger.exception(f"{label} fetch failed", extra={"region": region.id})
            return fallback(f"{label} fetch failed: {exc}")

    def get_status(self, region: RegionConfig) -> AggregateResponse:
        """Compute the full status payload for one region."""
        logger.info("Computing ocean status", extra={"region": region.id})
        weather, tides = self._fetch_both(region)

        errors: List[ProviderError] = [e for e in (weather.error, tides.error) if e is not None]
        now = self.now_fn()

        try:
            hourly = merge_tide_heights(weather.hourly, tides.hourly_heights)
            current_weather = backfill_current_weather(weather.current, hourly, now)
            activities = evaluate_all(
                current_weather,
                tides.events,
                hourly,
                region.thresholds,
                now,
                timezone=region.timezone,
            )
            conditions = CurrentConditions(
                weather=current_weather,
                current_tide=find_current_tide(tides.events, now),
                next_tide=find_next_tide(tides.events, now),
                hourly_forecast=hourly or None,
            )
            response = AggregateResponse(
                region=region.display_name,
                timestamp=now,
                activities=activities,
                conditions=conditions,
                hourly_forecast=list(hourly) or None,
                errors=errors,
            )
        except Exception as exc:
            logger.exception("Failed to assemble ocean status", extra={"region": region.id})
            raise OceanStatusError(f"Failed to compute status for {region.id}: {exc}") from exc

        logger.info(
            "Computed ocean status",
            extra={
                "region": region.id,
                "statuses": {a.value: r.status.value for a, r in activities.items()},
                "degraded": [e.provider for e in errors],
            },
        )
        return response
