"""Monthly aggregation over ledger snapshots.

Every function here is pure: it reads the snapshot it is given and returns
new values, so the same inputs always produce the same aggregate.
"""
from decimal import Decimal
from typing import Dict, Iterable, List

from pydantic import BaseModel

from cofre.features.ledger.schemas import (
    AdHocEntrySnapshot,
    FixedCommitmentSnapshot,
    LedgerSnapshot,
    RecurringContributionSnapshot,
)
from cofre.features.wallets.schedule import is_contribution_active
from cofre.utils.finance_utils import ZERO, is_active, month_range, to_decimal, total_amount

UNCATEGORIZED = "uncategorized"


class CategoryTotal(BaseModel):
    total: Decimal = ZERO
    count: int = 0

    class Config:
        frozen = True


class MonthlyAggregate(BaseModel):
    month: int
    year: int
    fixed_income: Decimal = ZERO
    extra_income: Decimal = ZERO
    fixed_expense: Decimal = ZERO
    variable_expense: Decimal = ZERO
    contribution_expense: Decimal = ZERO
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    balance: Decimal = ZERO
    by_category: Dict[str, CategoryTotal] = {}

    class Config:
        frozen = True


def active_fixed_expenses(
    expenses: Iterable[FixedCommitmentSnapshot],
    month: int,
    year: int
) -> List[FixedCommitmentSnapshot]:
    bounds = month_range(month, year)
    return [
        e for e in expenses
        if is_active(e.start_date, e.end_date, bounds["month_start"], bounds["month_end"])
    ]


def variable_expenses_in_month(
    entries: Iterable[AdHocEntrySnapshot],
    month: int,
    year: int
) -> List[AdHocEntrySnapshot]:
    bounds = month_range(month, year)
    return [
        e for e in entries
        if e.entry_date is not None and bounds["month_start"] <= e.entry_date <= bounds["month_end"]
    ]


def extra_incomes_in_month(
    entries: Iterable[AdHocEntrySnapshot],
    month: int,
    year: int
) -> List[AdHocEntrySnapshot]:
    return [e for e in entries if e.month == month and e.year == year]


def active_contributions(
    contributions: Iterable[RecurringContributionSnapshot],
    month: int,
    year: int
) -> List[RecurringContributionSnapshot]:
    return [c for c in contributions if is_contribution_active(c, month, year)]


def group_by_category(rows: Iterable) -> Dict[str, CategoryTotal]:
    """Bucket rows by ``category_id``, rows without one under ``uncategorized``."""
    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for row in rows:
        key = row.category_id or UNCATEGORIZED
        totals[key] = totals.get(key, ZERO) + to_decimal(row.amount)
        counts[key] = counts.get(key, 0) + 1
    return {
        key: CategoryTotal(total=totals[key], count=counts[key])
        for key in sorted(totals)
    }


def compute_month(ledger: LedgerSnapshot, month: int, year: int) -> MonthlyAggregate:
    # Fixed incomes have no activation window
    fixed_income = total_amount(ledger.fixed_incomes)
    extra_income = total_amount(extra_incomes_in_month(ledger.extra_incomes, month, year))

    fixed_rows = active_fixed_expenses(ledger.fixed_expenses, month, year)
    variable_rows = variable_expenses_in_month(ledger.variable_expenses, month, year)
    contribution_rows = active_contributions(ledger.contributions, month, year)

    fixed_expense = total_amount(fixed_rows)
    variable_expense = total_amount(variable_rows)
    contribution_expense = total_amount(contribution_rows, attr="monthly_contribution")

    total_income = fixed_income + extra_income
    total_expense = fixed_expense + variable_expense + contribution_expense

    return MonthlyAggregate(
        month=month,
        year=year,
        fixed_income=fixed_income,
        extra_income=extra_income,
        fixed_expense=fixed_expense,
        variable_expense=variable_expense,
        contribution_expense=contribution_expense,
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        by_category=group_by_category(variable_rows + fixed_rows),
    )
