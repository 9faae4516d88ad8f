import pytest

from cofre.core import scheduler as scheduler_module
from cofre.features.market_rates.cache import TTLCache

pytestmark = pytest.mark.anyio


def test_refresh_job_is_registered():
    sched = scheduler_module.build_scheduler(TTLCache(60))
    job = sched.get_job(scheduler_module.MARKET_RATES_JOB_ID)
    assert job is not None
    assert job.func is scheduler_module.run_market_rates_refresh


def test_disabled_scheduler_is_not_started(monkeypatch):
    monkeypatch.setattr(scheduler_module.settings, "ENABLE_SCHEDULER", False)
    assert scheduler_module.start_scheduler(TTLCache(60)) is None


async def test_refresh_failure_is_logged_not_raised(monkeypatch, caplog):
    async def boom(self):
        raise RuntimeError("bcb down")

    monkeypatch.setattr(scheduler_module.MarketRatesService, "refresh", boom)
    await scheduler_module.run_market_rates_refresh(TTLCache(60))
    assert "Market Rates Refresh Failed" in caplog.text
