from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Cofre"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: Optional[str] = None
    APP_TIMEZONE: str = "America/Sao_Paulo"

    # Aggregation / scoring knobs
    TRAILING_AVERAGE_MONTHS: int = 3
    EMERGENCY_RESERVE_MONTHS: int = 6
    PROJECTION_DEFAULT_MONTHS: int = 6
    PROJECTION_MAX_MONTHS: int = 24

    # Central bank (BCB) market rates
    MARKET_RATES_BASE_URL: str = "https://api.bcb.gov.br/dados/serie"
    MARKET_RATES_TTL_SECONDS: int = 24 * 60 * 60
    MARKET_RATES_TIMEOUT_SECONDS: float = 10.0
    MARKET_RATES_REFRESH_HOUR: int = 6

    ENABLE_SCHEDULER: bool = False

    @property
    def ASYNC_DATABASE_URL(self) -> Optional[str]:
        """Database URL rewritten for an async driver."""
        url = self.DATABASE_URL
        if not url:
            return None
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://") and "+aiosqlite" not in url:
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()
