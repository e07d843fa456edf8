"""Interfaces and result types for the weather and tide data sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from ocean_status.domain import HourlyForecastPoint, ProviderError, TideEvent, TideHeight, WeatherSnapshot


@dataclass
class WeatherResult:
    """Normalized weather fetch: current snapshot plus up to 24 forecast hours."""
    current: WeatherSnapshot
    hourly: List[HourlyForecastPoint] = field(default_factory=list)
    error: Optional[ProviderError] = None


@dataclass
class TidesResult:
    """Normalized tide fetch: sorted extrema and an optional dense height series."""
    events: List[TideEvent] = field(default_factory=list)
    hourly_heights: Optional[List[TideHeight]] = None
    error: Optional[ProviderError] = None


class WeatherSource(Protocol):
    """Anything that can provide current and hourly weather for a coordinate."""

    def fetch_weather(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "UTC",
    ) -> WeatherResult:
        """Return normalized weather; never raises for upstream failures."""
        ...

    def fallback(self, message: str, *, timezone: str = "UTC") -> WeatherResult:
        """Return synthesized weather tagged with a ProviderError carrying `message`."""
        ...


class TidesSource(Protocol):
    """Anything that can provide the tide schedule for a coordinate."""

    def fetch_tides(
        self,
        latitude: float,
        longitude: float,
        days: int = 3,
    ) -> TidesResult:
        """Return normalized tides; never raises for upstream failures."""
        ...

    def fallback(self, message: str) -> TidesResult:
        """Return synthesized tides tagged with a ProviderError carrying `message`."""
        ...
