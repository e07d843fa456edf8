import datetime as dt
import math
import random
import unittest

import requests

from ocean_status.data_sources import worldtides_client
from ocean_status.data_sources.worldtides_client import (
    WorldTidesProvider,
    dedupe_tides,
    derive_extrema,
    normalize_tides_payload,
)
from ocean_status.domain import TideEvent, TideHeight, TideType

NOW = dt.datetime(2024, 6, 1, 0, 0, tzinfo=dt.timezone.utc)
NOW_TS = int(NOW.timestamp())


class DummyResp:
    def __init__(self, payload, status_code=200, reason="OK"):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)

    def json(self):
        return self._payload


def _session(resp=None, exc=None, calls=None):
    def fake_get(url, params=None, timeout=None):
        if calls is not None:
            calls.append(params)
        if exc is not None:
            raise exc
        return resp

    return type("S", (), {"get": staticmethod(fake_get)})()


def _provider(session, api_key="k"):
    return WorldTidesProvider(api_key=api_key, session=session, rng=random.Random(2), now_fn=lambda: NOW)


def _sine_heights(hours=48, step_minutes=30):
    """Semi-diurnal curve centred on 0.5 m with a 0.45 m amplitude."""
    out = []
    for i in range(hours * 60 // step_minutes):
        t = NOW + dt.timedelta(minutes=i * step_minutes)
        h = 0.5 + 0.45 * math.sin(2 * math.pi * (i * step_minutes / 60) / 12.42)
        out.append({"dt": int(t.timestamp()), "height": round(h, 3)})
    return out


class TestNormalizeTidesPayload(unittest.TestCase):
    def test_extremes_take_precedence(self):
        data = {
            "extremes": [
                {"dt": NOW_TS + 4 * 3600, "height": 0.2, "type": "Low"},
                {"dt": NOW_TS + 3600, "height": 0.9, "type": "High"},
            ],
            "predictions": [{"t": "2024-06-01T05:00:00Z", "v": 1.0, "type": "H"}],
            "heights": [{"dt": NOW_TS, "height": 0.5}],
        }
        result = normalize_tides_payload(data)

        self.assertEqual([e.type for e in result.events], [TideType.HIGH, TideType.LOW])
        self.assertEqual(result.events[0].time, NOW + dt.timedelta(hours=1))
        self.assertEqual(len(result.hourly_heights), 1)

    def test_predictions_used_when_no_extremes(self):
        data = {
            "predictions": [
                {"t": "2024-06-01T06:00:00", "v": 0.1, "type": "L"},
                {"t": "2024-06-01T00:10:00Z", "v": 1.0, "type": "H"},
            ]
        }
        result = normalize_tides_payload(data)

        self.assertEqual(result.events[0].type, TideType.HIGH)
        self.assertEqual(result.events[1].time, dt.datetime(2024, 6, 1, 6, tzinfo=dt.timezone.utc))
        self.assertIsNone(result.hourly_heights)

    def test_heights_only_derives_alternating_extrema(self):
        result = normalize_tides_payload({"heights": _sine_heights()})

        self.assertGreaterEqual(len(result.events), 4)
        times = [e.time for e in result.events]
        self.assertEqual(times, sorted(times))
        for a, b in zip(result.events, result.events[1:]):
            self.assertNotEqual(a.type, b.type)
            self.assertGreater(b.time - a.time, dt.timedelta(minutes=60))
        for e in result.events:
            if e.type == TideType.HIGH:
                self.assertGreater(e.height, 0.3)
            else:
                self.assertLess(e.height, 0.7)

    def test_error_field_raises(self):
        with self.assertRaises(worldtides_client.WorldTidesError):
            normalize_tides_payload({"error": "Invalid key"})


class TestWorldTidesProvider(unittest.TestCase):
    def test_sends_heights_and_extremes_flags(self):
        calls = []
        payload = {"extremes": [{"dt": NOW_TS + 3600, "height": 0.9, "type": "High"}]}
        result = _provider(_session(DummyResp(payload), calls=calls)).fetch_tides(18.3, -68.8, days=3)

        self.assertIsNone(result.error)
        self.assertEqual(calls[0]["days"], 3)
        self.assertEqual(calls[0]["heights"], 1)
        self.assertEqual(calls[0]["extremes"], 1)
        self.assertEqual(calls[0]["key"], "k")

    def test_soft_error_falls_back_with_message(self):
        result = _provider(_session(DummyResp({"status": 400, "error": "Invalid key"}))).fetch_tides(0, 0)

        self.assertEqual(result.error.provider, "tides")
        self.assertEqual(result.error.message, "Invalid key")
        self.assertTrue(result.error.fallback_used)
        self.assertTrue(result.events)

    def test_timeout_falls_back(self):
        result = _provider(_session(exc=requests.Timeout("slow"))).fetch_tides(0, 0)
        self.assertIn("timeout", result.error.message)
        self.assertTrue(all(e.time > NOW for e in result.events))
        self.assertEqual(len(result.hourly_heights), 48)

    def test_missing_key_serves_mock_without_error(self):
        calls = []
        result = _provider(_session(calls=calls), api_key="  ").fetch_tides(0, 0)
        self.assertIsNone(result.error)
        self.assertTrue(result.events)
        self.assertEqual(calls, [])


def test_dedupe_drops_events_within_an_hour_of_last_kept():
    t0 = NOW
    events = [
        TideEvent(type=TideType.HIGH, height=1.0, time=t0 + dt.timedelta(minutes=30)),
        TideEvent(type=TideType.HIGH, height=1.0, time=t0),
        TideEvent(type=TideType.LOW, height=0.2, time=t0 + dt.timedelta(hours=6)),
    ]
    kept = dedupe_tides(events)
    assert [e.time for e in kept] == [t0, t0 + dt.timedelta(hours=6)]


def test_derive_extrema_empty_series():
    assert derive_extrema([]) == []


def test_derive_extrema_falls_back_to_strict_scan_for_short_series():
    heights = [
        TideHeight(time=NOW + dt.timedelta(hours=i), height=h)
        for i, h in enumerate([0.5, 0.9, 0.5, 0.1, 0.5, 0.9, 0.5])
    ]
    events = derive_extrema(heights)
    assert [e.type for e in events] == [TideType.HIGH, TideType.LOW, TideType.HIGH]


if __name__ == "__main__":
    unittest.main()
