from typing import Annotated

from fastapi import APIRouter, Depends, Request

from cofre.core.config import get_settings
from cofre.features.market_rates.cache import TTLCache
from cofre.features.market_rates.schemas import MarketRatesResponse
from cofre.features.market_rates.service import MarketRatesService

settings = get_settings()
router = APIRouter()


def get_market_rates_cache(request: Request) -> TTLCache[MarketRatesResponse]:
    """The app-wide cache, created on first use when the lifespan did not run."""
    cache = getattr(request.app.state, "market_rates_cache", None)
    if cache is None:
        cache = TTLCache(settings.MARKET_RATES_TTL_SECONDS)
        request.app.state.market_rates_cache = cache
    return cache


def get_market_rates_service(
    cache: Annotated[TTLCache[MarketRatesResponse], Depends(get_market_rates_cache)]
) -> MarketRatesService:
    return MarketRatesService(cache)


@router.get("", response_model=MarketRatesResponse)
async def get_market_rates(
    service: Annotated[MarketRatesService, Depends(get_market_rates_service)]
):
    """Current Selic, CDI and IPCA as annual percentages."""
    return await service.get_rates()
