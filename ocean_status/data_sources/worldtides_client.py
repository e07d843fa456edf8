"""Tides provider backed by the WorldTides v2 API.

WorldTides can answer with explicit `extremes`, a flat `predictions` list, or
only a dense `heights` series. Extremes are taken in that order of preference;
for a heights-only answer they are derived from the curve.
"""
from __future__ import annotations

import datetime as dt
import random
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Sequence

import requests

from ocean_status.app_types import NowFn, utc_now
from ocean_status.data_sources.base import TidesResult
from ocean_status.data_sources.mock_data import synthesize_tide_heights, synthesize_tides
from ocean_status.data_sources.session import build_session
from ocean_status.domain import ProviderError, TideEvent, TideHeight, TideType
from utils.logging_utils import get_tagged_logger, mask_url, redact_secrets

logger = get_tagged_logger(__name__, tag="data_sources/worldtides")

WORLDTIDES_URL = "https://www.worldtides.info/api/v2"
PROVIDER_NAME = "tides"

DEDUP_WINDOW = dt.timedelta(minutes=60)
MIN_HIGH_TIDE_HEIGHT = 0.3   # m, candidate highs must exceed this
MAX_LOW_TIDE_HEIGHT = 0.7    # m, candidate lows must stay under this
MIN_DERIVED_EXTREMA = 4


class WorldTidesError(RuntimeError):
    """Soft failure reported in the body of a WorldTides response."""


def _utc_from_unix(ts: Any) -> dt.datetime:
    """Convert a Unix timestamp (seconds) to an aware UTC datetime."""
    return dt.datetime.fromtimestamp(int(ts), tz=dt.timezone.utc)


def _parse_iso(value: str) -> dt.datetime:
    """Parse an ISO timestamp, assuming UTC when no offset is given."""
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _events_from_extremes(extremes: Sequence[Mapping[str, Any]]) -> List[TideEvent]:
    """Direct mapping of WorldTides `extremes` ("High"/"Low", Unix dt)."""
    return [
        TideEvent(
            type=TideType.HIGH if str(e["type"]).lower() == "high" else TideType.LOW,
            height=e["height"],
            time=_utc_from_unix(e["dt"]),
        )
        for e in extremes
    ]


def _events_from_predictions(predictions: Sequence[Mapping[str, Any]]) -> List[TideEvent]:
    """Direct mapping of the flat `predictions` list ("H"/"L", ISO time)."""
    return [
        TideEvent(
            type=TideType.HIGH if p["type"] == "H" else TideType.LOW,
            height=p["v"],
            time=_parse_iso(p["t"]),
        )
        for p in predictions
    ]


def _window_extrema(heights: Sequence[TideHeight], mean: float) -> List[TideEvent]:
    """5-point window scan: local max above the mean is high, local min below the mean is low."""
    out: List[TideEvent] = []
    for i in range(2, len(heights) - 2):
        window = [h.height for h in heights[i - 2 : i + 3]]
        curr = heights[i]
        if curr.height == max(window) and curr.height > mean and curr.height > MIN_HIGH_TIDE_HEIGHT:
            out.append(TideEvent(type=TideType.HIGH, height=curr.height, time=curr.time))
        elif curr.height == min(window) and curr.height < mean and curr.height < MAX_LOW_TIDE_HEIGHT:
            out.append(TideEvent(type=TideType.LOW, height=curr.height, time=curr.time))
    return out


def _strict_extrema(heights: Sequence[TideHeight]) -> List[TideEvent]:
    """3-point strict local max/min scan with the same height thresholds."""
    out: List[TideEvent] = []
    for i in range(1, len(heights) - 1):
        prev, curr, nxt = heights[i - 1].height, heights[i], heights[i + 1].height
        if curr.height > prev and curr.height > nxt and curr.height > MIN_HIGH_TIDE_HEIGHT:
            out.append(TideEvent(type=TideType.HIGH, height=curr.height, time=curr.time))
        elif curr.height < prev and curr.height < nxt and curr.height < MAX_LOW_TIDE_HEIGHT:
            out.append(TideEvent(type=TideType.LOW, height=curr.height, time=curr.time))
    return out


def derive_extrema(heights: Sequence[TideHeight]) -> List[TideEvent]:
    """Find highs/lows in a dense height series.

    Shallow or exaggerated cycles can slip past the 5-point window, so fewer
    than four hits triggers the simpler 3-point scan instead.
    """
    if not heights:
        return []
    mean = sum(h.height for h in heights) / len(heights)
    events = _window_extrema(heights, mean)
    if len(events) < MIN_DERIVED_EXTREMA:
        logger.debug("Window scan found too few extrema; retrying strict scan", extra={"found": len(events)})
        events = _strict_extrema(heights)
    return events


def dedupe_tides(events: Sequence[TideEvent], window: dt.timedelta = DEDUP_WINDOW) -> List[TideEvent]:
    """Sort chronologically and drop events within `window` of the last kept event."""
    kept: List[TideEvent] = []
    for event in sorted(events, key=lambda e: e.time):
        if not kept or abs(event.time - kept[-1].time) > window:
            kept.append(event)
    return kept


def parse_heights(heights: Sequence[Mapping[str, Any]]) -> List[TideHeight]:
    """Map the WorldTides `heights` array onto TideHeight samples."""
    return [TideHeight(time=_utc_from_unix(h["dt"]), height=h["height"]) for h in heights]


def normalize_tides_payload(data: Mapping[str, Any]) -> TidesResult:
    """Normalize a WorldTides response body into a TidesResult (without error)."""
    if not isinstance(data, Mapping):
        raise ValueError("WorldTides response is not a JSON object")
    if data.get("error"):
        raise WorldTidesError(str(data["error"]))

    heights = parse_heights(data.get("heights") or [])

    if data.get("extremes"):
        events = _events_from_extremes(data["extremes"])
    elif data.get("predictions"):
        events = _events_from_predictions(data["predictions"])
    else:
        events = derive_extrema(heights)

    return TidesResult(events=dedupe_tides(events), hourly_heights=heights or None)


@dataclass
class WorldTidesProvider:
    """Fetch tide extremes (and heights) for a coordinate, with mock-data fallback."""

    api_key: str | None = None
    timeout_seconds: float = 15.0
    session: requests.Session = field(default_factory=build_session)
    rng: random.Random = field(default_factory=random.Random)
    now_fn: NowFn = utc_now
    base_url: str = WORLDTIDES_URL

    def _mock(self) -> TidesResult:
        """Synthesized tides with no error attached."""
        now = self.now_fn()
        return TidesResult(
            events=synthesize_tides(now, self.rng),
            hourly_heights=synthesize_tide_heights(now),
        )

    def fallback(self, message: str) -> TidesResult:
        """Synthesized tides tagged as a degraded result."""
        result = self._mock()
        result.error = ProviderError(provider=PROVIDER_NAME, message=message, fallback_used=True)
        return result

    def fetch_tides(self, latitude: float, longitude: float, days: int = 3) -> TidesResult:
        """Fetch and normalize tides; any upstream failure yields mock data plus an error."""
        if not self.api_key or not self.api_key.strip():
            logger.warning("WorldTides API key not configured; using mock tide data")
            return self._mock()

        params = {
            "lat": latitude,
            "lon": longitude,
            "days": days,
            "key": self.api_key,
            "heights": 1,
            "extremes": 1,
        }
        request_url = requests.Request("GET", self.base_url, params=params).prepare().url or self.base_url
        logger.info("Fetching WorldTides predictions", extra={"url": mask_url(request_url)})

        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout_seconds)
            resp.raise_for_status()
            result = normalize_tides_payload(resp.json())
        except requests.Timeout:
            message = f"WorldTides API request timeout ({self.timeout_seconds:g}s)"
            logger.error(message)
            return self.fallback(message)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            reason = exc.response.reason if exc.response is not None else ""
            message = f"WorldTides API error: {status} {reason}".strip()
            logger.error(message)
            return self.fallback(message)
        except WorldTidesError as exc:
            message = str(exc)
            logger.error("WorldTides reported an error: %s", message)
            return self.fallback(message)
        except requests.RequestException as exc:
            message = redact_secrets(f"WorldTides API request failed: {exc}")
            logger.error(message)
            return self.fallback(message)
        except (KeyError, TypeError, ValueError) as exc:
            message = redact_secrets(f"WorldTides API returned malformed payload: {exc}")
            logger.error(message)
            return self.fallback(message)

        logger.debug(
            "Normalized WorldTides payload",
            extra={"events": len(result.events), "heights": len(result.hourly_heights or [])},
        )
        return result
