"""Five-pillar financial score (0-1000).

Each pillar is worth up to 200 points and is computed independently from the
same snapshot. Missing data resolves to a fixed policy value, never an error.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel

from cofre.features.analytics.aggregator import MonthlyAggregate, compute_month, variable_expenses_in_month
from cofre.features.analytics.averages import trailing_variable_average
from cofre.features.ledger.schemas import AssetSnapshot, CategoryBudgetSnapshot, LedgerSnapshot
from cofre.utils.finance_utils import ZERO, round_half_up, to_decimal

PILLAR_MAX = 200
MAX_SCORE = 1000

RESERVE_ASSET_CATEGORIES = ("POUPANCA",)
PAID_OFF = "QUITADO"

SCORE_LEVELS = (
    (801, "Excellent"),
    (601, "Good"),
    (401, "Regular"),
    (201, "Poor"),
)

SAVINGS_BUCKETS = ((20, 200), (10, 150), (5, 100), (0, 50))
DIVERSIFICATION_BUCKETS = {0: 0, 1: 40, 2: 80, 3: 120, 4: 160}


class Pillar(BaseModel):
    name: str
    score: int
    max: int = PILLAR_MAX
    detail: str = ""


class ScoreResult(BaseModel):
    score: int
    max_score: int = MAX_SCORE
    level: str
    pillars: List[Pillar]


class ReserveStatus(NamedTuple):
    target: Decimal
    current: Decimal


def score_level(score: int) -> str:
    for threshold, name in SCORE_LEVELS:
        if score >= threshold:
            return name
    return "Critical"


def _clamp(value: int) -> int:
    return max(0, min(PILLAR_MAX, value))


def emergency_reserve(
    ledger: LedgerSnapshot,
    assets: Iterable[AssetSnapshot],
    month: int,
    year: int,
    window_months: int = 3,
    reserve_months: int = 6,
    fixed_expense: Optional[Decimal] = None
) -> ReserveStatus:
    """Ideal reserve and what is already set aside for it.

    Target is ``(trailing variable average + month's fixed expenses) * reserve_months``.
    Savings held are paid-off savings assets plus balances of wallets that
    are not backing an asset.
    """
    if fixed_expense is None:
        fixed_expense = compute_month(ledger, month, year).fixed_expense
    average = trailing_variable_average(ledger.variable_expenses, month, year, window_months)
    target = (average + fixed_expense) * reserve_months

    current = sum(
        (to_decimal(a.estimated_value) for a in assets
         if a.category in RESERVE_ASSET_CATEGORIES and a.status == PAID_OFF),
        ZERO,
    )
    current += sum(
        (to_decimal(c.current_amount) for c in ledger.contributions if not c.is_linked),
        ZERO,
    )
    return ReserveStatus(target, current)


class ScoreEngine:

    def __init__(self, window_months: int = 3, reserve_months: int = 6):
        self.window_months = window_months
        self.reserve_months = reserve_months

    def score(
        self,
        ledger: LedgerSnapshot,
        month: int,
        year: int,
        budgets: List[CategoryBudgetSnapshot],
        assets: List[AssetSnapshot],
        has_emergency_goal: bool
    ) -> ScoreResult:
        aggregate = compute_month(ledger, month, year)
        average = trailing_variable_average(ledger.variable_expenses, month, year, self.window_months)
        spent = self._variable_spent_by_category(ledger, month, year)

        pillars = [
            self.savings_pillar(aggregate),
            self.budget_pillar(budgets, spent),
            self.reserve_pillar(ledger, assets, aggregate, has_emergency_goal),
            self.diversification_pillar(assets),
            self.habits_pillar(aggregate, average),
        ]
        total = sum(p.score for p in pillars)
        return ScoreResult(score=total, level=score_level(total), pillars=pillars)

    @staticmethod
    def _variable_spent_by_category(ledger: LedgerSnapshot, month: int, year: int) -> Dict[Optional[str], Decimal]:
        spent: Dict[Optional[str], Decimal] = {}
        for entry in variable_expenses_in_month(ledger.variable_expenses, month, year):
            spent[entry.category_id] = spent.get(entry.category_id, ZERO) + to_decimal(entry.amount)
        return spent

    def savings_pillar(self, aggregate: MonthlyAggregate) -> Pillar:
        income = aggregate.total_income
        if income <= 0:
            return Pillar(name="Savings", score=0, detail="No income this month")

        rate = (income - aggregate.total_expense) / income * 100
        points = 0
        for floor, bucket_points in SAVINGS_BUCKETS:
            if rate >= floor:
                points = bucket_points
                break
        return Pillar(name="Savings", score=_clamp(points), detail=f"Rate: {rate:.1f}%")

    def budget_pillar(
        self,
        budgets: List[CategoryBudgetSnapshot],
        spent: Dict[Optional[str], Decimal]
    ) -> Pillar:
        if not budgets:
            return Pillar(name="Budget", score=100, detail="No budget defined")

        compliance = ZERO
        for budget in budgets:
            amount = to_decimal(budget.amount)
            used = spent.get(budget.category_id, ZERO)
            if amount <= 0:
                compliance += Decimal("1") if used == 0 else ZERO
            elif used <= amount:
                compliance += Decimal("1")
            else:
                # Linear penalty reaching zero at 200% of the budget
                compliance += max(ZERO, 2 - used / amount)

        points = round_half_up(compliance / len(budgets) * PILLAR_MAX)
        return Pillar(
            name="Budget",
            score=_clamp(points),
            detail=f"{len(budgets)} budgeted categories",
        )

    def reserve_pillar(
        self,
        ledger: LedgerSnapshot,
        assets: List[AssetSnapshot],
        aggregate: MonthlyAggregate,
        has_emergency_goal: bool
    ) -> Pillar:
        if not has_emergency_goal:
            return Pillar(name="Reserve", score=0, detail="No emergency goal defined")

        reserve = emergency_reserve(
            ledger,
            assets,
            aggregate.month,
            aggregate.year,
            window_months=self.window_months,
            reserve_months=self.reserve_months,
            fixed_expense=aggregate.fixed_expense,
        )
        if reserve.target <= 0:
            return Pillar(name="Reserve", score=0, detail="No expenses to base a reserve on")

        progress = min(reserve.current / reserve.target, Decimal("1"))
        return Pillar(
            name="Reserve",
            score=_clamp(round_half_up(progress * PILLAR_MAX)),
            detail=f"{round_half_up(progress * 100)}% of the ideal reserve",
        )

    def diversification_pillar(self, assets: List[AssetSnapshot]) -> Pillar:
        count = len({a.category for a in assets})
        points = DIVERSIFICATION_BUCKETS.get(count, PILLAR_MAX)
        plural = "y" if count == 1 else "ies"
        return Pillar(
            name="Diversification",
            score=_clamp(points),
            detail=f"{count} asset categor{plural}",
        )

    def habits_pillar(self, aggregate: MonthlyAggregate, previous_average: Decimal) -> Pillar:
        income = aggregate.total_income
        fixed = aggregate.fixed_expense

        # (a) fixed expenses as a share of income
        if income > 0:
            ratio = fixed / income
            if ratio < Decimal("0.5"):
                fixed_points = 100
            else:
                fixed_points = round_half_up(max(ZERO, 1 - ratio) * 100)
        else:
            fixed_points = 0

        # (b) variable spend against the trailing average of earlier months
        current = aggregate.variable_expense
        if current <= previous_average:
            variable_points = 100
        elif previous_average > 0:
            variable_points = round_half_up(max(ZERO, 2 - current / previous_average) * 100)
        else:
            variable_points = 50

        share = round_half_up(fixed / income * 100) if income > 0 else 0
        return Pillar(
            name="Habits",
            score=_clamp(fixed_points + variable_points),
            detail=f"Fixed: {share}% of income",
        )
