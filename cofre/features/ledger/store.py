import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, delete, func, and_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.features.assets.models import Asset
from cofre.features.budgets.models import CategoryBudget
from cofre.features.goals.models import FinancialGoal, GoalType
from cofre.features.ledger.models import AdHocEntry, EntryKind, FixedCommitment, FixedExpensePayment
from cofre.features.ledger.schemas import (
    AdHocEntrySnapshot,
    AssetSnapshot,
    CategoryBudgetSnapshot,
    FixedCommitmentSnapshot,
    LedgerSnapshot,
    RecurringContributionSnapshot,
)
from cofre.features.wallets.models import Wallet, WalletSkippedMonth

logger = logging.getLogger(__name__)


def wallet_snapshot(wallet: Wallet, linked_asset_id: Optional[UUID] = None) -> RecurringContributionSnapshot:
    return RecurringContributionSnapshot(
        id=wallet.id,
        account_id=wallet.account_id,
        name=wallet.name,
        target_amount=wallet.target_amount,
        current_amount=wallet.current_amount or Decimal("0"),
        start_date=wallet.start_date,
        end_date=wallet.end_date,
        periods_total=wallet.periods_total,
        monthly_contribution=wallet.monthly_contribution,
        skipped=frozenset((s.month, s.year) for s in wallet.skipped_months),
        linked_asset_id=linked_asset_id,
    )


class LedgerStore:
    """Read side of the ledger plus the few atomic writes the engine relies on.

    Reads return immutable snapshots. Database errors propagate unchanged.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self, table):
        if self.db.get_bind().dialect.name == "postgresql":
            return postgresql.insert(table)
        return sqlite.insert(table)

    async def list_fixed_commitments(
        self,
        account_id: str,
        kind: EntryKind
    ) -> List[FixedCommitmentSnapshot]:
        stmt = (
            select(FixedCommitment)
            .where(FixedCommitment.account_id == account_id)
            .where(FixedCommitment.kind == kind)
            .order_by(FixedCommitment.start_date, FixedCommitment.id)
        )
        result = await self.db.execute(stmt)
        return [FixedCommitmentSnapshot.model_validate(row) for row in result.scalars().all()]

    async def list_ad_hoc_entries(
        self,
        account_id: str,
        kind: EntryKind,
        date_range: Optional[Tuple[date, date]] = None,
        month_year: Optional[Tuple[int, int]] = None
    ) -> List[AdHocEntrySnapshot]:
        """Variable expenses filter on ``date_range``; extra incomes on ``month_year``."""
        stmt = (
            select(AdHocEntry)
            .where(AdHocEntry.account_id == account_id)
            .where(AdHocEntry.kind == kind)
        )
        if date_range is not None:
            start, end = date_range
            stmt = stmt.where(AdHocEntry.entry_date >= start).where(AdHocEntry.entry_date <= end)
        if month_year is not None:
            month, year = month_year
            stmt = stmt.where(AdHocEntry.month == month).where(AdHocEntry.year == year)
        stmt = stmt.order_by(AdHocEntry.entry_date, AdHocEntry.year, AdHocEntry.month, AdHocEntry.id)

        result = await self.db.execute(stmt)
        return [AdHocEntrySnapshot.model_validate(row) for row in result.scalars().all()]

    async def list_recurring_contributions(
        self,
        account_id: str,
        only_with_schedule: bool = False
    ) -> List[RecurringContributionSnapshot]:
        stmt = (
            select(Wallet, Asset.id)
            .outerjoin(Asset, Asset.wallet_id == Wallet.id)
            .where(Wallet.account_id == account_id)
            .order_by(Wallet.start_date, Wallet.id)
            .execution_options(populate_existing=True)
        )
        if only_with_schedule:
            stmt = stmt.where(Wallet.monthly_contribution.is_not(None))

        result = await self.db.execute(stmt)
        return [wallet_snapshot(wallet, asset_id) for wallet, asset_id in result.all()]

    async def list_category_budgets(
        self,
        account_id: str,
        month: int,
        year: int
    ) -> List[CategoryBudgetSnapshot]:
        stmt = (
            select(CategoryBudget)
            .where(CategoryBudget.account_id == account_id)
            .where(CategoryBudget.month == month)
            .where(CategoryBudget.year == year)
            .order_by(CategoryBudget.category_id)
        )
        result = await self.db.execute(stmt)
        return [CategoryBudgetSnapshot.model_validate(row) for row in result.scalars().all()]

    async def list_assets(
        self,
        account_id: str,
        category: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[AssetSnapshot]:
        stmt = select(Asset).where(Asset.account_id == account_id)
        if category is not None:
            stmt = stmt.where(Asset.category == category)
        if status is not None:
            stmt = stmt.where(Asset.status == status)
        stmt = stmt.order_by(Asset.created_at, Asset.id)

        result = await self.db.execute(stmt)
        return [
            AssetSnapshot(
                id=a.id,
                account_id=a.account_id,
                category=a.category.value,
                status=a.status.value,
                estimated_value=a.estimated_value,
                wallet_id=a.wallet_id,
            )
            for a in result.scalars().all()
        ]

    async def has_emergency_goal(self, account_id: str) -> bool:
        stmt = (
            select(func.count(FinancialGoal.id))
            .where(FinancialGoal.account_id == account_id)
            .where(FinancialGoal.type == GoalType.EMERGENCY_FUND)
        )
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def load_snapshot(
        self,
        account_id: str,
        since: Optional[date] = None,
        until: Optional[date] = None
    ) -> LedgerSnapshot:
        """Load every collection the Aggregator reads.

        ``since``/``until`` bound the ad hoc entries; fixed commitments and
        wallets are always loaded whole since their windows are open-ended.
        """
        variable_range = None
        if since is not None and until is not None:
            variable_range = (since, until)

        fixed_incomes = await self.list_fixed_commitments(account_id, EntryKind.INCOME)
        fixed_expenses = await self.list_fixed_commitments(account_id, EntryKind.EXPENSE)
        variable_expenses = await self.list_ad_hoc_entries(account_id, EntryKind.EXPENSE, date_range=variable_range)
        extra_incomes = await self._list_extra_incomes_between(account_id, since, until)
        contributions = await self.list_recurring_contributions(account_id, only_with_schedule=False)

        return LedgerSnapshot(
            account_id=account_id,
            fixed_incomes=fixed_incomes,
            fixed_expenses=fixed_expenses,
            extra_incomes=extra_incomes,
            variable_expenses=variable_expenses,
            contributions=contributions,
        )

    async def _list_extra_incomes_between(
        self,
        account_id: str,
        since: Optional[date],
        until: Optional[date]
    ) -> List[AdHocEntrySnapshot]:
        if since is None or until is None:
            return await self.list_ad_hoc_entries(account_id, EntryKind.INCOME)

        start_key = since.year * 12 + since.month
        end_key = until.year * 12 + until.month
        period_key = AdHocEntry.year * 12 + AdHocEntry.month
        stmt = (
            select(AdHocEntry)
            .where(AdHocEntry.account_id == account_id)
            .where(AdHocEntry.kind == EntryKind.INCOME)
            .where(and_(period_key >= start_key, period_key <= end_key))
            .order_by(AdHocEntry.year, AdHocEntry.month, AdHocEntry.id)
        )
        result = await self.db.execute(stmt)
        return [AdHocEntrySnapshot.model_validate(row) for row in result.scalars().all()]

    # --- atomic writes ---

    async def upsert_skip_exception(
        self,
        contribution_id: UUID,
        month: int,
        year: int,
        skip: bool
    ) -> None:
        """Insert-if-absent or delete-if-present on ``(wallet, month, year)``.

        Both directions are single statements, so racing toggles on the same
        key settle on one row or none.
        """
        if skip:
            stmt = (
                self._insert(WalletSkippedMonth)
                .values(wallet_id=contribution_id, month=month, year=year)
                .on_conflict_do_nothing(index_elements=["wallet_id", "month", "year"])
            )
        else:
            stmt = (
                delete(WalletSkippedMonth)
                .where(WalletSkippedMonth.wallet_id == contribution_id)
                .where(WalletSkippedMonth.month == month)
                .where(WalletSkippedMonth.year == year)
            )
        await self.db.execute(stmt)
        await self.db.commit()
        logger.info(f"Skip exception for wallet {contribution_id} {month}/{year} set to {skip}")

    async def upsert_category_budget(
        self,
        account_id: str,
        category_id: str,
        month: int,
        year: int,
        amount: Decimal
    ) -> CategoryBudget:
        stmt = self._insert(CategoryBudget).values(
            account_id=account_id,
            category_id=category_id,
            month=month,
            year=year,
            amount=amount,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["account_id", "category_id", "month", "year"],
            set_={"amount": stmt.excluded.amount, "updated_at": func.now()},
        )
        await self.db.execute(stmt)
        await self.db.commit()

        result = await self.db.execute(
            select(CategoryBudget)
            .where(CategoryBudget.account_id == account_id)
            .where(CategoryBudget.category_id == category_id)
            .where(CategoryBudget.month == month)
            .where(CategoryBudget.year == year)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def upsert_fixed_payment(
        self,
        fixed_commitment_id: UUID,
        month: int,
        year: int
    ) -> None:
        stmt = (
            self._insert(FixedExpensePayment)
            .values(
                fixed_commitment_id=fixed_commitment_id,
                month=month,
                year=year,
                paid_at=datetime.now(timezone.utc),
            )
            .on_conflict_do_nothing(index_elements=["fixed_commitment_id", "month", "year"])
        )
        await self.db.execute(stmt)
        await self.db.commit()

    async def list_payments(
        self,
        commitment_ids: List[UUID],
        month: int,
        year: int
    ) -> Dict[UUID, datetime]:
        """Payment time per fixed expense already marked paid for the month."""
        if not commitment_ids:
            return {}
        stmt = (
            select(FixedExpensePayment.fixed_commitment_id, FixedExpensePayment.paid_at)
            .where(FixedExpensePayment.fixed_commitment_id.in_(commitment_ids))
            .where(FixedExpensePayment.month == month)
            .where(FixedExpensePayment.year == year)
        )
        result = await self.db.execute(stmt)
        return {row.fixed_commitment_id: row.paid_at for row in result.all()}
