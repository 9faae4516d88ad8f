import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cofre.core.config import get_settings
from cofre.core.database import engine, Base
from cofre.core.logging_config import setup_logging
from cofre.core.scheduler import start_scheduler
from cofre.features.market_rates.cache import TTLCache

from cofre.features.analytics.router import router as analytics_router
from cofre.features.assets.router import router as assets_router
from cofre.features.budgets.router import router as budgets_router
from cofre.features.goals.router import router as goals_router
from cofre.features.ledger.router import router as ledger_router
from cofre.features.market_rates.router import router as market_rates_router
from cofre.features.wallets.router import router as wallets_router

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Database Table Creation
    if settings.ENVIRONMENT in ["local", "development"]:
        logger.info(f"Environment: {settings.ENVIRONMENT}. Ensuring tables...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        logger.info(f"Environment: {settings.ENVIRONMENT}. Schema managed by alembic.")

    app.state.market_rates_cache = TTLCache(settings.MARKET_RATES_TTL_SECONDS)
    scheduler = start_scheduler(app.state.market_rates_cache)

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=503,
        content={"detail": "Data unavailable"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances that are not JSON serialisable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


app.include_router(ledger_router, prefix=f"{settings.API_V1_STR}/ledger", tags=["ledger"])
app.include_router(wallets_router, prefix=f"{settings.API_V1_STR}/wallets", tags=["wallets"])
app.include_router(assets_router, prefix=f"{settings.API_V1_STR}/assets", tags=["assets"])
app.include_router(budgets_router, prefix=f"{settings.API_V1_STR}/budgets", tags=["budgets"])
app.include_router(goals_router, prefix=f"{settings.API_V1_STR}/goals", tags=["goals"])
app.include_router(analytics_router, prefix=f"{settings.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(market_rates_router, prefix=f"{settings.API_V1_STR}/market-rates", tags=["market-rates"])


@app.get("/", tags=["status"])
async def root():
    return {
        "app": settings.PROJECT_NAME,
        "engine": "Cofre Aggregation Engine 1.0",
        "status": "Operational",
    }
