"""Shared protocol for region-keyed status caches."""

from typing import Optional, Protocol

from ocean_status.domain import AggregateResponse


class StatusCache(Protocol):
    """Protocol for status cache backends."""

    def get(self, region_id: str) -> Optional[AggregateResponse]:
        """Return the cached response, or None if missing or expired."""

    def put(self, region_id: str, response: AggregateResponse) -> None:
        """Store a response, replacing any existing entry."""

    def delete(self, region_id: str) -> None:
        """Drop an entry without raising if it is absent."""

    def clear(self) -> None:
        """Drop every entry."""
