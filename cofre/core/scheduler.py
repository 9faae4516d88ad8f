import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from cofre.core.config import get_settings
from cofre.features.market_rates.cache import TTLCache
from cofre.features.market_rates.schemas import MarketRatesResponse
from cofre.features.market_rates.service import MarketRatesService

logger = logging.getLogger(__name__)
settings = get_settings()

MARKET_RATES_JOB_ID = "market_rates_refresh"


async def run_market_rates_refresh(cache: TTLCache[MarketRatesResponse]):
    """
    Refresh the market rate cache ahead of the day's first requests.
    """
    logger.info("Starting Market Rates Refresh...")
    try:
        await MarketRatesService(cache).refresh()
        logger.info("Market Rates Refresh Completed.")
    except Exception as e:
        logger.error(f"Market Rates Refresh Failed: {e}", exc_info=True)


def build_scheduler(cache: TTLCache[MarketRatesResponse]) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.APP_TIMEZONE)
    trigger = CronTrigger(hour=settings.MARKET_RATES_REFRESH_HOUR, minute=0, timezone=settings.APP_TIMEZONE)
    scheduler.add_job(
        run_market_rates_refresh,
        trigger,
        args=[cache],
        id=MARKET_RATES_JOB_ID,
        replace_existing=True,
    )
    return scheduler


def start_scheduler(cache: TTLCache[MarketRatesResponse]) -> Optional[AsyncIOScheduler]:
    """
    Start the scheduler if ENABLE_SCHEDULER is True.
    Set ENABLE_SCHEDULER=False when an external cron drives the refresh.
    """
    if not settings.ENABLE_SCHEDULER:
        logger.info("Scheduler disabled (ENABLE_SCHEDULER=False).")
        return None

    scheduler = build_scheduler(cache)
    scheduler.start()
    logger.info("Scheduler started. Jobs scheduled.")
    return scheduler
