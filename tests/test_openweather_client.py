import datetime as dt
import random
import unittest

import requests

from ocean_status.data_sources import openweather_client
from ocean_status.data_sources.openweather_client import OpenWeatherProvider

NOW = dt.datetime(2024, 6, 1, 12, 0, tzinfo=dt.timezone.utc)
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
            calls.append({"url": url, "params": params, "timeout": timeout})
        if exc is not None:
            raise exc
        return resp

    return type("S", (), {"get": staticmethod(fake_get)})()


def _payload(hours=2):
    return {
        "current": {
            "dt": NOW_TS,
            "wind_speed": 4.2,
            "wind_deg": 120,
            "clouds": 35,
            "temp": 28.1,
            "pressure": 1013,
            "humidity": 74,
            "rain": {"1h": 0.2},
        },
        "hourly": [
            {"dt": NOW_TS + 3600 * i, "wind_speed": 4.0 + i, "clouds": 40, "temp": 28.0}
            for i in range(hours)
        ],
    }


def _provider(session, api_key="k"):
    return OpenWeatherProvider(api_key=api_key, session=session, rng=random.Random(1), now_fn=lambda: NOW)


class TestOpenWeatherProvider(unittest.TestCase):
    def test_normalizes_current_and_hourly(self):
        calls = []
        result = _provider(_session(DummyResp(_payload()), calls=calls)).fetch_weather(18.37, -68.83)

        self.assertIsNone(result.error)
        self.assertEqual(result.current.wind_speed, 4.2)
        self.assertEqual(result.current.wind_direction, 120)
        self.assertEqual(result.current.rain, 0.2)
        self.assertEqual(result.current.timestamp, NOW)
        self.assertEqual(len(result.hourly), 2)
        self.assertEqual(result.hourly[0].rain, 0.0)
        self.assertIsNone(result.hourly[0].wind_direction)
        self.assertEqual(calls[0]["params"]["units"], "metric")
        self.assertEqual(calls[0]["params"]["appid"], "k")
        self.assertEqual(calls[0]["timeout"], 15.0)

    def test_hourly_is_truncated_to_24_points(self):
        result = _provider(_session(DummyResp(_payload(hours=48)))).fetch_weather(0, 0)
        self.assertEqual(len(result.hourly), openweather_client.HOURLY_LIMIT)

    def test_missing_key_serves_mock_without_error(self):
        calls = []
        result = _provider(_session(calls=calls), api_key=None).fetch_weather(0, 0)
        self.assertIsNone(result.error)
        self.assertEqual(len(result.hourly), 24)
        self.assertEqual(calls, [])

    def test_timeout_falls_back_with_error(self):
        result = _provider(_session(exc=requests.Timeout("slow"))).fetch_weather(0, 0)
        self.assertIsNotNone(result.error)
        self.assertEqual(result.error.provider, "weather")
        self.assertTrue(result.error.fallback_used)
        self.assertIn("timeout", result.error.message)
        self.assertEqual(len(result.hourly), 24)

    def test_http_error_falls_back_with_status_in_message(self):
        result = _provider(_session(DummyResp({}, status_code=401, reason="Unauthorized"))).fetch_weather(0, 0)
        self.assertEqual(result.error.message, "OpenWeather API error: 401 Unauthorized")

    def test_transport_error_message_does_not_leak_appid(self):
        exc = requests.ConnectionError("Max retries exceeded with url: /data/3.0/onecall?lat=0&appid=k&units=metric")
        result = _provider(_session(exc=exc)).fetch_weather(0, 0)
        self.assertIn("appid=***", result.error.message)
        self.assertNotIn("appid=k&", result.error.message)

    def test_malformed_payload_falls_back(self):
        result = _provider(_session(DummyResp({"hourly": []}))).fetch_weather(0, 0)
        self.assertEqual(result.error.provider, "weather")
        self.assertIn("malformed", result.error.message)


def test_normalize_current_clamps_cloudiness():
    snapshot = openweather_client.normalize_current({"dt": NOW_TS, "wind_speed": 1, "clouds": 130})
    assert snapshot.cloudiness == 100
    assert snapshot.rain == 0
    assert snapshot.temperature is None


if __name__ == "__main__":
    unittest.main()
