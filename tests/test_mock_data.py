import datetime as dt
import random

import pytest

from ocean_status.data_sources import mock_data
from ocean_status.domain import TideType

NOW = dt.datetime(2024, 6, 1, 12, 0, tzinfo=dt.timezone.utc)


@pytest.mark.parametrize("seed", [0, 1, 42])
def test_synthesized_weather_stays_in_bounds(seed):
    current, hourly = mock_data.synthesize_weather(NOW, random.Random(seed))

    assert len(hourly) == 24
    assert current.timestamp == NOW
    assert hourly[0].time == NOW
    assert all(b.time - a.time == dt.timedelta(hours=1) for a, b in zip(hourly, hourly[1:]))
    for point in [current, *hourly]:
        assert point.wind_speed >= mock_data.MIN_WIND_SPEED
        assert point.wind_speed <= 4.5
        assert 0 <= point.cloudiness <= 100
        assert point.rain >= 0


def test_rain_only_falls_in_the_afternoon_window():
    # 12:00 UTC in Santo Domingo is 08:00 local, so local hours 14..18 are offsets 6..10
    _, hourly = mock_data.synthesize_weather(NOW, random.Random(7), timezone="America/Santo_Domingo")
    for offset, point in enumerate(hourly):
        local_hour = (8 + offset) % 24
        if local_hour not in mock_data.RAIN_WINDOW_HOURS:
            assert point.rain == 0


def test_current_rain_is_zero_outside_window():
    current, _ = mock_data.synthesize_weather(NOW, random.Random(3), timezone="UTC")
    assert current.rain == 0


def test_synthesized_tides_alternate_and_are_future_only():
    events = mock_data.synthesize_tides(NOW, random.Random(5))

    assert len(events) == mock_data.TIDE_EVENT_COUNT
    assert all(e.time > NOW for e in events)
    for a, b in zip(events, events[1:]):
        assert a.type != b.type
        gap = (b.time - a.time).total_seconds() / 3600
        assert 5.5 <= gap <= 6.5
    for e in events:
        lo, hi = mock_data.HIGH_TIDE_BAND if e.type == TideType.HIGH else mock_data.LOW_TIDE_BAND
        assert lo <= e.height <= hi


def test_synthesized_tide_heights_follow_twelve_hour_cycle():
    heights = mock_data.synthesize_tide_heights(NOW)
    assert len(heights) == 48
    assert heights[0].height == pytest.approx(0.55)
    assert heights[3].height == pytest.approx(1.0)
    assert heights[9].height == pytest.approx(0.1)
    assert heights[12].height == heights[0].height
