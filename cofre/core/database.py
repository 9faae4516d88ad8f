import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from cofre.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

db_url = settings.ASYNC_DATABASE_URL
if not db_url:
    # In-memory SQLite keeps imports working in build/test contexts
    logger.warning("DATABASE_URL not set. Using in-memory SQLite.")
    db_url = "sqlite+aiosqlite:///:memory:"


def build_engine(url: str):
    """Create the async engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=False, **engine_kwargs)

    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        connect_args={"timeout": 30, "command_timeout": 30},
    )


engine = build_engine(db_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
