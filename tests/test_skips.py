import asyncio
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cofre.core.database import Base, build_engine
from cofre.features.ledger.store import LedgerStore
from cofre.features.wallets.models import Wallet, WalletSkippedMonth
from cofre.features.wallets.skips import SkipRegistry
from tests.factories import ACCOUNT

pytestmark = pytest.mark.anyio


async def _wallet(db):
    wallet = Wallet(
        account_id=ACCOUNT,
        name="Trip",
        target_amount=Decimal("1200"),
        current_amount=Decimal("0"),
        start_date=date(2024, 1, 1),
        periods_total=12,
        monthly_contribution=Decimal("100"),
    )
    db.add(wallet)
    await db.commit()
    return wallet


async def _skip_rows(db, wallet_id):
    result = await db.execute(
        select(func.count(WalletSkippedMonth.id)).where(WalletSkippedMonth.wallet_id == wallet_id)
    )
    return result.scalar()


async def test_skipping_twice_keeps_one_exception(db_session):
    wallet = await _wallet(db_session)
    registry = SkipRegistry(db_session)

    assert await registry.toggle_skip(wallet.id, 3, 2024, True) is True
    assert await registry.toggle_skip(wallet.id, 3, 2024, True) is True

    assert await _skip_rows(db_session, wallet.id) == 1
    assert await registry.is_skipped(wallet.id, 3, 2024)
    assert not await registry.is_skipped(wallet.id, 4, 2024)


async def test_unskipping_is_idempotent(db_session):
    wallet = await _wallet(db_session)
    registry = SkipRegistry(db_session)

    await registry.toggle_skip(wallet.id, 3, 2024, True)
    assert await registry.toggle_skip(wallet.id, 3, 2024, False) is False
    assert await registry.toggle_skip(wallet.id, 3, 2024, False) is False

    assert await _skip_rows(db_session, wallet.id) == 0
    assert not await registry.is_skipped(wallet.id, 3, 2024)


async def test_snapshot_reflects_current_skips(db_session):
    wallet = await _wallet(db_session)
    store = LedgerStore(db_session)

    await SkipRegistry(db_session).toggle_skip(wallet.id, 5, 2024, True)
    [snapshot] = await store.list_recurring_contributions(ACCOUNT)
    assert snapshot.is_skipped(5, 2024)

    await SkipRegistry(db_session).toggle_skip(wallet.id, 5, 2024, False)
    [snapshot] = await store.list_recurring_contributions(ACCOUNT)
    assert not snapshot.is_skipped(5, 2024)


async def test_racing_skips_settle_on_one_row(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'skips.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with factory() as session:
            wallet_id = (await _wallet(session)).id

        async def skip_march():
            async with factory() as session:
                return await SkipRegistry(session).toggle_skip(wallet_id, 3, 2024, True)

        results = await asyncio.gather(*(skip_march() for _ in range(8)))
        assert results == [True] * 8

        async with factory() as session:
            assert await _skip_rows(session, wallet_id) == 1
            assert await SkipRegistry(session).is_skipped(wallet_id, 3, 2024)
    finally:
        await engine.dispose()
