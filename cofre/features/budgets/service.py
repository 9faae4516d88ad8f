import logging
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.features.budgets.models import CategoryBudget
from cofre.features.budgets.schemas import BudgetStatusItem, BudgetStatusResponse, BudgetUpsert
from cofre.features.ledger.models import EntryKind
from cofre.features.ledger.store import LedgerStore
from cofre.utils.finance_utils import ZERO, month_range, quantize_money, to_decimal

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = Decimal("80")


def budget_usage(actual: Decimal, budget: Decimal) -> Decimal:
    if budget > 0:
        return actual / budget * 100
    return Decimal("100") if actual > 0 else ZERO


def budget_status(percentage: Decimal) -> str:
    """``green`` below 80%, ``warning`` up to 100%, ``danger`` beyond."""
    if percentage < WARNING_THRESHOLD:
        return "green"
    if percentage <= 100:
        return "warning"
    return "danger"


class BudgetService:

    async def upsert_budget(self, db: AsyncSession, account_id: str, data: BudgetUpsert) -> CategoryBudget:
        budget = await LedgerStore(db).upsert_category_budget(
            account_id, data.category_id, data.month, data.year, data.amount
        )
        logger.info(f"Budget for {data.category_id} {data.month}/{data.year} set to {data.amount}")
        return budget

    async def list_budgets(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int
    ) -> List[CategoryBudget]:
        stmt = (
            select(CategoryBudget)
            .where(CategoryBudget.account_id == account_id)
            .where(CategoryBudget.month == month)
            .where(CategoryBudget.year == year)
            .order_by(CategoryBudget.category_id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete_budget(self, db: AsyncSession, account_id: str, budget_id: UUID) -> None:
        stmt = select(CategoryBudget).where(
            CategoryBudget.id == budget_id,
            CategoryBudget.account_id == account_id
        )
        budget = (await db.execute(stmt)).scalar_one_or_none()
        if not budget:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
        await db.delete(budget)
        await db.commit()

    async def get_budget_status(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int
    ) -> BudgetStatusResponse:
        """Each budget against the month's variable spending in its category."""
        budgets = await self.list_budgets(db, account_id, month, year)
        bounds = month_range(month, year)
        expenses = await LedgerStore(db).list_ad_hoc_entries(
            account_id,
            EntryKind.EXPENSE,
            date_range=(bounds["month_start"], bounds["month_end"]),
        )

        spent: Dict[Optional[str], Decimal] = {}
        for entry in expenses:
            spent[entry.category_id] = spent.get(entry.category_id, ZERO) + to_decimal(entry.amount)

        items: List[BudgetStatusItem] = []
        for budget in budgets:
            amount = to_decimal(budget.amount)
            actual = spent.get(budget.category_id, ZERO)
            percentage = budget_usage(actual, amount)
            items.append(BudgetStatusItem(
                id=budget.id,
                category_id=budget.category_id,
                budget=float(amount),
                actual=float(quantize_money(actual)),
                remaining=float(quantize_money(amount - actual)),
                percentage=float(quantize_money(percentage)),
                status=budget_status(percentage),
            ))

        return BudgetStatusResponse(
            month=month,
            year=year,
            budgets=items,
            total_budget=float(sum((to_decimal(b.amount) for b in budgets), ZERO)),
            total_actual=float(quantize_money(sum((spent.get(b.category_id, ZERO) for b in budgets), ZERO))),
        )
