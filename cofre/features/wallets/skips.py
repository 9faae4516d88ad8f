from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.features.ledger.store import LedgerStore
from cofre.features.wallets.models import WalletSkippedMonth


class SkipRegistry:
    """Per-month suppressions of a wallet's contribution, with set semantics."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = LedgerStore(db)

    async def is_skipped(self, contribution_id: UUID, month: int, year: int) -> bool:
        stmt = (
            select(func.count(WalletSkippedMonth.id))
            .where(WalletSkippedMonth.wallet_id == contribution_id)
            .where(WalletSkippedMonth.month == month)
            .where(WalletSkippedMonth.year == year)
        )
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def toggle_skip(self, contribution_id: UUID, month: int, year: int, skip: bool) -> bool:
        """Idempotent: repeating the same toggle leaves the set unchanged."""
        await self.store.upsert_skip_exception(contribution_id, month, year, skip)
        return skip
