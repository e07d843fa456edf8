"""Domain vocabulary and strict schemas for ocean activity recommendations.

This module defines the stable contract between the upstream data providers,
the rule evaluation engine and the HTTP layer: enums, normalized weather and
tide snapshots, per-activity thresholds, and the aggregate response payload.
No interpretation logic lives here.

Attributes are snake_case in Python and serialize with camelCase aliases
(``windSpeed``, ``fallbackUsed``...) which is what the web client consumes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling and camelCase aliases."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class _FrozenBaseModel(_StrictBaseModel):
    """Immutable variant for point-in-time snapshots."""

    model_config = ConfigDict(frozen=True)


class ActivityStatus(str, Enum):
    """Three-level verdict for a single activity."""
    GOOD = "good"
    CAUTION = "caution"
    BAD = "bad"


class TideType(str, Enum):
    """Kind of tide extremum."""
    HIGH = "high"
    LOW = "low"


class ActivityType(str, Enum):
    """Water activities the service makes recommendations for."""
    SNORKELING = "snorkeling"
    KAYAKING = "kayaking"
    SUP = "sup"
    FISHING = "fishing"


class WeatherSnapshot(_FrozenBaseModel):
    """Weather at one point in time, normalized to metric units."""
    wind_speed: float = Field(ge=0)               # m/s
    wind_direction: float | None = None           # degrees, 0 = North
    cloudiness: float                             # percent
    rain: float = Field(default=0.0, ge=0)        # mm over the last hour
    temperature: float | None = None              # Celsius
    pressure: float | None = None                 # hPa
    humidity: float | None = None                 # percent
    timestamp: datetime

    @field_validator("cloudiness")
    @classmethod
    def clamp_cloudiness(cls, value: float) -> float:
        """Clamp cloud cover to [0, 100]."""
        return max(0.0, min(100.0, float(value)))


class TideEvent(_FrozenBaseModel):
    """A single high or low tide."""
    type: TideType
    height: float  # meters
    time: datetime


class TideHeight(_FrozenBaseModel):
    """One sample of a dense tide height series."""
    time: datetime
    height: float  # meters


class HourlyForecastPoint(_StrictBaseModel):
    """Forecast for one hour; tide_height is attached by the forecast merge."""
    time: datetime
    wind_speed: float = Field(ge=0)
    wind_direction: float | None = None
    rain: float = Field(default=0.0, ge=0)
    cloudiness: float
    temperature: float | None = None
    pressure: float | None = None
    humidity: float | None = None
    tide_height: float | None = None

    @field_validator("cloudiness")
    @classmethod
    def clamp_cloudiness(cls, value: float) -> float:
        """Clamp cloud cover to [0, 100]."""
        return max(0.0, min(100.0, float(value)))


class ActivityThresholds(_StrictBaseModel):
    """Static per-region, per-activity ceilings and tide preference."""
    max_wind_speed: float = Field(gt=0)   # m/s
    max_cloudiness: float = Field(gt=0)   # percent
    max_rain: float = Field(gt=0)         # mm
    preferred_tide: TideType | None = None


class ActivityRecommendation(_StrictBaseModel):
    """Verdict, justification and optional time window for one activity."""
    status: ActivityStatus
    reason: str
    window: str | None = None


class ProviderError(_StrictBaseModel):
    """Informational record of a provider that degraded to mock data."""
    provider: str
    message: str
    fallback_used: bool = True


class CurrentConditions(_StrictBaseModel):
    """Merged conditions shown alongside the recommendations."""
    weather: WeatherSnapshot
    current_tide: TideEvent | None = None
    next_tide: TideEvent | None = None
    hourly_forecast: List[HourlyForecastPoint] | None = None


class AggregateResponse(_StrictBaseModel):
    """Unified status payload for one region."""
    region: str
    timestamp: datetime
    activities: Dict[ActivityType, ActivityRecommendation]
    conditions: CurrentConditions | None = None
    hourly_forecast: List[HourlyForecastPoint] | None = None
    errors: List[ProviderError] | None = None

    @field_validator("errors")
    @classmethod
    def drop_empty_errors(cls, value: List[ProviderError] | None) -> List[ProviderError] | None:
        """Never carry an empty error list; absence means no degradation."""
        return value or None


class Coordinates(_StrictBaseModel):
    """Latitude/longitude pair in decimal degrees."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class RegionConfig(_StrictBaseModel):
    """Static configuration for one supported coastal region."""
    id: str
    name: str
    display_name: str
    coordinates: Coordinates
    timezone: str = "UTC"
    thresholds: Dict[ActivityType, ActivityThresholds]
