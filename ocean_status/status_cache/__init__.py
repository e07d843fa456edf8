"""Status cache backends."""

from .base import StatusCache
from .memory import DEFAULT_TTL_SECONDS, InMemoryStatusCache

__all__ = [
    "StatusCache",
    "InMemoryStatusCache",
    "DEFAULT_TTL_SECONDS",
]
