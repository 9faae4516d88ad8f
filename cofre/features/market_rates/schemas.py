from typing import Optional

from cofre.core.schemas import CamelModel


class RateData(CamelModel):
    value: str
    date: str


class MarketRatesResponse(CamelModel):
    selic: Optional[RateData] = None
    cdi: Optional[RateData] = None
    ipca: Optional[RateData] = None

    def has_any(self) -> bool:
        return any(rate is not None for rate in (self.selic, self.cdi, self.ipca))
