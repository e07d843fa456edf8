"""Weather and tide providers plus the factory that wires them from settings."""

from .base import TidesResult, TidesSource, WeatherResult, WeatherSource
from .factory import build_data_sources
from .openweather_client import OpenWeatherProvider
from .worldtides_client import WorldTidesProvider, dedupe_tides, derive_extrema

__all__ = [
    "build_data_sources",
    "OpenWeatherProvider",
    "WorldTidesProvider",
    "WeatherSource",
    "TidesSource",
    "WeatherResult",
    "TidesResult",
    "dedupe_tides",
    "derive_extrema",
]
