"""Shared HTTP session for upstream providers: short in-memory cache plus retries."""
from __future__ import annotations

import requests
import requests_cache
from retry_requests import retry

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="data_sources/session")


def build_session(*, cache_seconds: int = 300, retries: int = 2, backoff_factor: float = 0.2) -> requests.Session:
    """Return a requests session that caches responses in memory and retries 5xx errors.

    The cache never touches disk; it only absorbs bursts of identical upstream
    calls within `cache_seconds`.
    """
    cache_session = requests_cache.CachedSession(
        "ocean_status_http",
        backend="memory",
        expire_after=cache_seconds,
    )
    logger.debug(
        "Built upstream HTTP session",
        extra={"cache_seconds": cache_seconds, "retries": retries},
    )
    return retry(cache_session, retries=retries, backoff_factor=backoff_factor)
