"""Cache-fronted facade over the orchestration service."""
from __future__ import annotations

import threading
from typing import Optional, Tuple

from ocean_status.config import settings
from ocean_status.data_sources import build_data_sources
from ocean_status.domain import AggregateResponse, RegionConfig
from ocean_status.forecast_service import OceanStatusService
from ocean_status.status_cache import InMemoryStatusCache, StatusCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="status_manager")


class StatusManager:
    """Serve region statuses from the cache, computing them on a miss.

    Concurrent misses for the same region each compute; the last write wins.
    """

    def __init__(self, service: OceanStatusService, cache: StatusCache) -> None:
        self.service = service
        self.cache = cache

    def get_ocean_status(self, region: RegionConfig) -> Tuple[AggregateResponse, bool]:
        """Return (response, cache_hit) keyed by the canonical region id."""
        cached = self.cache.get(region.id)
        if cached is not None:
            logger.debug("Status cache hit", extra={"region": region.id})
            return cached, True

        logger.debug("Status cache miss", extra={"region": region.id})
        response = self.service.get_status(region)
        self.cache.put(region.id, response)
        return response, False


_manager: Optional[StatusManager] = None
_manager_lock = threading.Lock()


def _init_manager() -> StatusManager:
    """Build the process-wide manager from settings."""
    weather, tides = build_data_sources(settings)
    service = OceanStatusService(
        weather,
        tides,
        tide_days=settings.tide_forecast_days,
        fetch_timeout_seconds=max(settings.weather_timeout_seconds, settings.tides_timeout_seconds) + 5,
    )
    logger.info("Using InMemoryStatusCache")
    return StatusManager(service, InMemoryStatusCache())


def get_status_manager() -> StatusManager:
    """Return the shared manager, creating it on first use."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = _init_manager()
        return _manager


def set_status_manager(manager: Optional[StatusManager]) -> None:
    """Override (or reset with None) the shared manager, e.g. for tests."""
    global _manager
    with _manager_lock:
        _manager = manager
