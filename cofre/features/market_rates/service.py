import asyncio
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

import httpx

from cofre.core.config import get_settings
from cofre.features.market_rates.cache import TTLCache
from cofre.features.market_rates.schemas import MarketRatesResponse, RateData
from cofre.utils.finance_utils import CENT

settings = get_settings()
logger = logging.getLogger(__name__)

# Central bank (BCB) SGS series
SERIES = {
    "selic": 432,  # annual target rate
    "cdi": 12,     # daily rate
    "ipca": 433,   # monthly rate
}

# Compounding periods per year for series published as non-annual rates
ANNUALISATION_PERIODS = {
    "cdi": 252,
    "ipca": 12,
}


def to_annual_rate(name: str, raw_value: Decimal) -> Decimal:
    periods = ANNUALISATION_PERIODS.get(name)
    if periods is None:
        return raw_value
    return ((1 + raw_value / 100) ** periods - 1) * 100


class MarketRatesService:
    """Selic, CDI and IPCA from the BCB open data API, cached for a day."""

    def __init__(
        self,
        cache: TTLCache[MarketRatesResponse],
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.cache = cache
        self.transport = transport
        self.base_url = settings.MARKET_RATES_BASE_URL.rstrip("/")
        self.timeout = settings.MARKET_RATES_TIMEOUT_SECONDS

    def _series_url(self, series: int) -> str:
        return f"{self.base_url}/bcdata.sgs.{series}/dados/ultimos/1"

    async def _fetch_rate(self, client: httpx.AsyncClient, name: str) -> Optional[RateData]:
        """Latest point of one series, ``None`` when the API does not answer usefully."""
        try:
            resp = await client.get(self._series_url(SERIES[name]), params={"formato": "json"})
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, list) or not data:
                logger.warning(f"Empty response for {name} series")
                return None
            raw = Decimal(str(data[0]["valor"]))
            annual = to_annual_rate(name, raw).quantize(CENT, rounding=ROUND_HALF_UP)
            return RateData(value=str(annual), date=str(data[0]["data"]))
        except (httpx.HTTPError, ValueError, KeyError, InvalidOperation) as e:
            logger.warning(f"Failed to fetch {name} rate: {e}")
            return None

    async def fetch_rates(self) -> MarketRatesResponse:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            selic, cdi, ipca = await asyncio.gather(
                self._fetch_rate(client, "selic"),
                self._fetch_rate(client, "cdi"),
                self._fetch_rate(client, "ipca"),
            )
        return MarketRatesResponse(selic=selic, cdi=cdi, ipca=ipca)

    async def get_rates(self) -> MarketRatesResponse:
        cached = self.cache.get()
        if cached is not None:
            return cached
        return await self.refresh()

    async def refresh(self) -> MarketRatesResponse:
        """Fetch and cache. Only responses with at least one rate are cached;
        an empty result falls back to the last cached entry, even if expired.
        """
        rates = await self.fetch_rates()
        if rates.has_any():
            self.cache.set(rates)
            logger.info("Market rates refreshed")
            return rates

        stale = self.cache.get_stale()
        if stale is not None:
            logger.warning("Market rates unavailable, serving stale cache")
            return stale
        return rates
