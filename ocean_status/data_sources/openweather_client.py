"""Weather provider backed by the OpenWeather One Call 3.0 API.

Normalizes the upstream payload into WeatherSnapshot/HourlyForecastPoint and
degrades to synthesized weather when no key is configured or the call fails.
"""
from __future__ import annotations

import datetime as dt
import random
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Tuple

import requests

from ocean_status.app_types import NowFn, utc_now
from ocean_status.data_sources.base import WeatherResult
from ocean_status.data_sources.mock_data import synthesize_weather
from ocean_status.data_sources.session import build_session
from ocean_status.domain import HourlyForecastPoint, ProviderError, WeatherSnapshot
from utils.logging_utils import get_tagged_logger, mask_url, redact_secrets

logger = get_tagged_logger(__name__, tag="data_sources/openweather")

OPENWEATHER_ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"
PROVIDER_NAME = "weather"
HOURLY_LIMIT = 24


def _utc_from_unix(ts: Any) -> dt.datetime:
    """Convert a Unix timestamp (seconds) to an aware UTC datetime."""
    return dt.datetime.fromtimestamp(int(ts), tz=dt.timezone.utc)


def _rain_1h(block: Mapping[str, Any]) -> float:
    """Return the 1-hour rain accumulation, 0 when the block is absent."""
    rain = block.get("rain") or {}
    return float(rain.get("1h") or 0.0)


def normalize_current(current: Mapping[str, Any]) -> WeatherSnapshot:
    """Map the upstream `current` object onto a WeatherSnapshot.

    Optional upstream fields (direction, temperature, pressure, humidity)
    stay None when absent.
    """
    return WeatherSnapshot(
        wind_speed=current["wind_speed"],
        wind_direction=current.get("wind_deg"),
        cloudiness=current["clouds"],
        rain=_rain_1h(current),
        temperature=current.get("temp"),
        pressure=current.get("pressure"),
        humidity=current.get("humidity"),
        timestamp=_utc_from_unix(current["dt"]),
    )


def normalize_hourly(hourly: List[Mapping[str, Any]] | None) -> List[HourlyForecastPoint]:
    """Map the upstream `hourly` array onto at most 24 forecast points, ordered by time."""
    out: List[HourlyForecastPoint] = []
    for hour in (hourly or [])[:HOURLY_LIMIT]:
        out.append(
            HourlyForecastPoint(
                time=_utc_from_unix(hour["dt"]),
                wind_speed=hour["wind_speed"],
                wind_direction=hour.get("wind_deg"),
                rain=_rain_1h(hour),
                cloudiness=hour["clouds"],
                temperature=hour.get("temp"),
                pressure=hour.get("pressure"),
                humidity=hour.get("humidity"),
            )
        )
    out.sort(key=lambda h: h.time)
    return out


def normalize_weather_payload(data: Mapping[str, Any]) -> Tuple[WeatherSnapshot, List[HourlyForecastPoint]]:
    """Normalize a full One Call response body."""
    if not isinstance(data, Mapping) or "current" not in data:
        raise ValueError("OpenWeather response missing 'current' block")
    return normalize_current(data["current"]), normalize_hourly(data.get("hourly"))


@dataclass
class OpenWeatherProvider:
    """Fetch current + hourly weather for a coordinate, with mock-data fallback."""

    api_key: str | None = None
    timeout_seconds: float = 15.0
    session: requests.Session = field(default_factory=build_session)
    rng: random.Random = field(default_factory=random.Random)
    now_fn: NowFn = utc_now
    base_url: str = OPENWEATHER_ONECALL_URL

    def _mock(self, timezone: str) -> WeatherResult:
        """Synthesized weather with no error attached."""
        current, hourly = synthesize_weather(self.now_fn(), self.rng, timezone=timezone)
        return WeatherResult(current=current, hourly=hourly)

    def fallback(self, message: str, *, timezone: str = "UTC") -> WeatherResult:
        """Synthesized weather tagged as a degraded result."""
        result = self._mock(timezone)
        result.error = ProviderError(provider=PROVIDER_NAME, message=message, fallback_used=True)
        return result

    def fetch_weather(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "UTC",
    ) -> WeatherResult:
        """Fetch and normalize weather; any upstream failure yields mock data plus an error."""
        if not self.api_key or not self.api_key.strip():
            logger.warning("OpenWeather API key not configured; using mock weather data")
            return self._mock(timezone)

        params = {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "metric",
            "exclude": "minutely,daily,alerts",
        }
        request_url = requests.Request("GET", self.base_url, params=params).prepare().url or self.base_url
        logger.info("Fetching OpenWeather conditions", extra={"url": mask_url(request_url)})

        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout_seconds)
            resp.raise_for_status()
            current, hourly = normalize_weather_payload(resp.json())
        except requests.Timeout:
            message = f"OpenWeather API request timeout ({self.timeout_seconds:g}s)"
            logger.error(message)
            return self.fallback(message, timezone=timezone)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            reason = exc.response.reason if exc.response is not None else ""
            message = f"OpenWeather API error: {status} {reason}".strip()
            logger.error(message)
            return self.fallback(message, timezone=timezone)
        except requests.RequestException as exc:
            message = redact_secrets(f"OpenWeather API request failed: {exc}")
            logger.error(message)
            return self.fallback(message, timezone=timezone)
        except (KeyError, TypeError, ValueError) as exc:
            message = redact_secrets(f"OpenWeather API returned malformed payload: {exc}")
            logger.error(message)
            return self.fallback(message, timezone=timezone)

        logger.debug("Normalized OpenWeather payload", extra={"hourly_count": len(hourly)})
        return WeatherResult(current=current, hourly=hourly)
