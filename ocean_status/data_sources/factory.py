"""Factory helpers for building the weather and tide providers at startup."""

from __future__ import annotations

from typing import Tuple

from ocean_status import config
from ocean_status.data_sources.base import TidesSource, WeatherSource
from ocean_status.data_sources.openweather_client import OpenWeatherProvider
from ocean_status.data_sources.session import build_session
from ocean_status.data_sources.worldtides_client import WorldTidesProvider
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_data_sources(settings: config.Settings | None = None) -> Tuple[WeatherSource, TidesSource]:
    """Instantiate both providers with credentials resolved from settings.

    Missing keys are not an error: the providers serve mock data instead.
    """
    settings = settings or config.settings
    session = build_session(cache_seconds=settings.http_cache_seconds, retries=settings.http_retries)

    weather = OpenWeatherProvider(
        api_key=settings.openweather_api_key,
        timeout_seconds=settings.weather_timeout_seconds,
        session=session,
    )
    tides = WorldTidesProvider(
        api_key=settings.worldtides_api_key,
        timeout_seconds=settings.tides_timeout_seconds,
        session=session,
    )
    logger.info(
        "Built data sources",
        extra={
            "weather_mode": "live" if settings.openweather_api_key else "mock",
            "tides_mode": "live" if settings.worldtides_api_key else "mock",
        },
    )
    return weather, tides
