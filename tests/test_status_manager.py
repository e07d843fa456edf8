import datetime as dt

from ocean_status import status_manager
from ocean_status.domain import AggregateResponse
from ocean_status.regions import CABARETE, SOSUA
from ocean_status.status_cache import InMemoryStatusCache
from ocean_status.status_manager import StatusManager

NOW = dt.datetime(2024, 6, 1, 12, tzinfo=dt.timezone.utc)


class CountingService:
    def __init__(self):
        self.calls = []

    def get_status(self, region):
        self.calls.append(region.id)
        return AggregateResponse(region=region.display_name, timestamp=NOW, activities={})


def test_miss_then_hit():
    service = CountingService()
    manager = StatusManager(service, InMemoryStatusCache())

    first, hit1 = manager.get_ocean_status(SOSUA)
    second, hit2 = manager.get_ocean_status(SOSUA)

    assert (hit1, hit2) == (False, True)
    assert first is second
    assert service.calls == ["sosua"]


def test_regions_are_cached_independently():
    service = CountingService()
    manager = StatusManager(service, InMemoryStatusCache())
    manager.get_ocean_status(SOSUA)
    _, hit = manager.get_ocean_status(CABARETE)
    assert hit is False
    assert service.calls == ["sosua", "cabarete"]


def test_expired_entry_recomputes():
    now = [0.0]
    service = CountingService()
    manager = StatusManager(service, InMemoryStatusCache(ttl_seconds=600, clock=lambda: now[0]))
    manager.get_ocean_status(SOSUA)
    now[0] = 601.0
    _, hit = manager.get_ocean_status(SOSUA)
    assert hit is False
    assert len(service.calls) == 2


def test_shared_manager_can_be_overridden():
    manager = StatusManager(CountingService(), InMemoryStatusCache())
    status_manager.set_status_manager(manager)
    try:
        assert status_manager.get_status_manager() is manager
    finally:
        status_manager.set_status_manager(None)
