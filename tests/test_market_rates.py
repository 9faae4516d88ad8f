from decimal import Decimal

import httpx
import pytest

from cofre.features.market_rates.cache import TTLCache
from cofre.features.market_rates.service import MarketRatesService, to_annual_rate

pytestmark = pytest.mark.anyio

SERIES_VALUES = {
    "432": "10.50",
    "12": "0.040168",
    "433": "0.42",
}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _series_handler(values, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        series = request.url.path.split("bcdata.sgs.")[1].split("/")[0]
        if calls is not None:
            calls.append(series)
        if series not in values:
            return httpx.Response(500)
        return httpx.Response(200, json=[{"data": "01/06/2024", "valor": values[series]}])
    return handler


def test_selic_is_already_annual():
    assert to_annual_rate("selic", Decimal("10.5")) == Decimal("10.5")


def test_monthly_rate_is_compounded():
    annual = to_annual_rate("ipca", Decimal("1"))
    assert annual.quantize(Decimal("0.01")) == Decimal("12.68")


async def test_fetches_all_series():
    cache = TTLCache(60, clock=FakeClock())
    service = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler(SERIES_VALUES)))

    rates = await service.get_rates()

    assert rates.selic.value == "10.50"
    assert rates.selic.date == "01/06/2024"
    assert rates.cdi is not None
    assert rates.ipca.value == "5.16"


async def test_one_failing_series_is_left_out():
    values = {k: v for k, v in SERIES_VALUES.items() if k != "12"}
    cache = TTLCache(60, clock=FakeClock())
    service = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler(values)))

    rates = await service.get_rates()
    assert rates.cdi is None
    assert rates.selic is not None


async def test_cached_until_ttl_expires():
    clock = FakeClock()
    calls = []
    cache = TTLCache(60, clock=clock)
    service = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler(SERIES_VALUES, calls)))

    await service.get_rates()
    clock.now = 30
    await service.get_rates()
    assert len(calls) == 3

    clock.now = 61
    await service.get_rates()
    assert len(calls) == 6


async def test_total_failure_serves_stale_entry():
    clock = FakeClock()
    cache = TTLCache(60, clock=clock)
    good = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler(SERIES_VALUES)))
    first = await good.get_rates()

    clock.now = 120
    broken = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler({})))
    assert await broken.get_rates() == first


async def test_empty_result_is_not_cached():
    calls = []
    cache = TTLCache(60, clock=FakeClock())
    service = MarketRatesService(cache, transport=httpx.MockTransport(_series_handler({}, calls)))

    rates = await service.get_rates()
    assert not rates.has_any()
    assert cache.get_stale() is None

    await service.get_rates()
    assert len(calls) == 6


async def test_malformed_payload_is_ignored():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"unexpected": True}])

    service = MarketRatesService(TTLCache(60, clock=FakeClock()), transport=httpx.MockTransport(handler))
    rates = await service.get_rates()
    assert not rates.has_any()


def test_cache_expiry_and_clear():
    clock = FakeClock()
    cache = TTLCache(10, clock=clock)
    cache.set("rates")
    clock.now = 10
    assert cache.get() is None
    assert cache.get_stale() == "rates"

    cache.clear()
    assert cache.get_stale() is None
