import datetime as dt
import threading
import unittest

from ocean_status.domain import AggregateResponse
from ocean_status.status_cache import DEFAULT_TTL_SECONDS, InMemoryStatusCache


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _response(region: str = "Sosua, DR") -> AggregateResponse:
    return AggregateResponse(region=region, timestamp=dt.datetime(2024, 6, 1, tzinfo=dt.timezone.utc), activities={})


class TestInMemoryStatusCache(unittest.TestCase):
    def test_default_ttl_is_ten_minutes(self):
        self.assertEqual(InMemoryStatusCache().ttl, DEFAULT_TTL_SECONDS)
        self.assertEqual(DEFAULT_TTL_SECONDS, 600)

    def test_get_after_put_within_ttl(self):
        clock = FakeClock()
        cache = InMemoryStatusCache(ttl_seconds=600, clock=clock)
        payload = _response()
        cache.put("sosua", payload)
        clock.advance(600)
        self.assertIs(cache.get("sosua"), payload)

    def test_expired_entry_is_evicted_on_read(self):
        clock = FakeClock()
        cache = InMemoryStatusCache(ttl_seconds=600, clock=clock)
        cache.put("sosua", _response())
        clock.advance(600.5)
        self.assertIsNone(cache.get("sosua"))
        self.assertEqual(len(cache), 0)

    def test_put_resets_age_and_last_write_wins(self):
        clock = FakeClock()
        cache = InMemoryStatusCache(ttl_seconds=10, clock=clock)
        cache.put("cabarete", _response("first"))
        clock.advance(8)
        cache.put("cabarete", _response("second"))
        clock.advance(8)
        self.assertEqual(cache.get("cabarete").region, "second")

    def test_delete_and_clear(self):
        cache = InMemoryStatusCache()
        cache.put("a", _response())
        cache.put("b", _response())
        cache.delete("a")
        cache.delete("missing")
        self.assertIsNone(cache.get("a"))
        cache.clear()
        self.assertIsNone(cache.get("b"))

    def test_concurrent_puts_are_safe(self):
        cache = InMemoryStatusCache()
        threads = [threading.Thread(target=cache.put, args=(f"r{i}", _response())) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(cache), 20)


if __name__ == "__main__":
    unittest.main()
