import logging
import zoneinfo
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.config import get_settings
from cofre.features.analytics.aggregator import MonthlyAggregate, compute_month
from cofre.features.analytics.comparison import CategoryChange, compare
from cofre.features.analytics.health import evaluate
from cofre.features.analytics.projection import project
from cofre.features.analytics.schemas import (
    AggregateResponse,
    CashFlowProjectionResponse,
    CategoryChangeResponse,
    CategoryExpense,
    CategoryTotalResponse,
    ExpenseBreakdown,
    ExpensesByCategoryResponse,
    FinancialHealthResponse,
    HealthSchema,
    IncomeBreakdown,
    MonthComparisonResponse,
    MonthlyEvolutionItem,
    MonthlySummaryResponse,
    PillarResponse,
    ProjectionAssumptionsResponse,
    ProjectionRowResponse,
    ScoreResponse,
    TotalOnly,
)
from cofre.features.analytics.averages import trailing_window
from cofre.features.analytics.score import ScoreEngine
from cofre.features.ledger.store import LedgerStore
from cofre.utils.finance_utils import month_range, quantize_money, shift_month

settings = get_settings()
logger = logging.getLogger(__name__)


def _money(value) -> float:
    return float(quantize_money(value))


def aggregate_response(aggregate: MonthlyAggregate) -> AggregateResponse:
    return AggregateResponse(
        month=aggregate.month,
        year=aggregate.year,
        fixed_income=_money(aggregate.fixed_income),
        extra_income=_money(aggregate.extra_income),
        fixed_expense=_money(aggregate.fixed_expense),
        variable_expense=_money(aggregate.variable_expense),
        contribution_expense=_money(aggregate.contribution_expense),
        total_income=_money(aggregate.total_income),
        total_expense=_money(aggregate.total_expense),
        balance=_money(aggregate.balance),
        by_category={
            key: CategoryTotalResponse(total=_money(bucket.total), count=bucket.count)
            for key, bucket in aggregate.by_category.items()
        },
    )


def _change_response(change: Optional[CategoryChange]) -> Optional[CategoryChangeResponse]:
    if change is None:
        return None
    return CategoryChangeResponse(
        category_id=change.category_id,
        month1_value=_money(change.month1_value),
        month2_value=_money(change.month2_value),
        change=_money(change.change),
        change_percent=_money(change.change_percent),
    )


class AnalyticsService:
    """Read-only reports over the ledger. Nothing here writes."""

    def __init__(self):
        self._tz = zoneinfo.ZoneInfo(settings.APP_TIMEZONE)
        self.window_months = settings.TRAILING_AVERAGE_MONTHS
        self.score_engine = ScoreEngine(
            window_months=settings.TRAILING_AVERAGE_MONTHS,
            reserve_months=settings.EMERGENCY_RESERVE_MONTHS,
        )

    def _get_today(self) -> date:
        """Get current date in the configured timezone."""
        return datetime.now(self._tz).date()

    def _resolve_period(self, month: Optional[int], year: Optional[int]) -> Tuple[int, int]:
        today = self._get_today()
        return month or today.month, year or today.year

    async def _load_for_month(self, db: AsyncSession, account_id: str, month: int, year: int):
        """Snapshot covering the month and the trailing window before it."""
        since, _ = trailing_window(month, year, self.window_months)
        until = month_range(month, year)["month_end"]
        return await LedgerStore(db).load_snapshot(account_id, since=since, until=until)

    async def get_month_aggregate(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int
    ) -> MonthlyAggregate:
        ledger = await self._load_for_month(db, account_id, month, year)
        return compute_month(ledger, month, year)

    async def get_monthly_summary(
        self,
        db: AsyncSession,
        account_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> MonthlySummaryResponse:
        month, year = self._resolve_period(month, year)
        aggregate = await self.get_month_aggregate(db, account_id, month, year)
        health = evaluate(aggregate.total_income, aggregate.total_expense)

        return MonthlySummaryResponse(
            month=month,
            year=year,
            income=IncomeBreakdown(
                fixed=_money(aggregate.fixed_income),
                extra=_money(aggregate.extra_income),
                total=_money(aggregate.total_income),
            ),
            expenses=ExpenseBreakdown(
                fixed=TotalOnly(total=_money(aggregate.fixed_expense)),
                variable=TotalOnly(total=_money(aggregate.variable_expense)),
                piggy_banks=TotalOnly(total=_money(aggregate.contribution_expense)),
                total=_money(aggregate.total_expense),
            ),
            balance=_money(aggregate.balance),
            health=HealthSchema(percentage=_money(health.percentage), status=health.status),
        )

    async def get_financial_health(
        self,
        db: AsyncSession,
        account_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> FinancialHealthResponse:
        month, year = self._resolve_period(month, year)
        aggregate = await self.get_month_aggregate(db, account_id, month, year)
        health = evaluate(aggregate.total_income, aggregate.total_expense)

        return FinancialHealthResponse(
            month=month,
            year=year,
            income=_money(aggregate.total_income),
            expenses=_money(aggregate.total_expense),
            fixed_expenses=_money(aggregate.fixed_expense),
            variable_expenses=_money(aggregate.variable_expense),
            balance=_money(aggregate.balance),
            health_status=health.status,
            health_percentage=_money(health.percentage),
        )

    async def get_financial_score(
        self,
        db: AsyncSession,
        account_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> ScoreResponse:
        month, year = self._resolve_period(month, year)
        store = LedgerStore(db)
        ledger = await self._load_for_month(db, account_id, month, year)
        budgets = await store.list_category_budgets(account_id, month, year)
        assets = await store.list_assets(account_id)
        has_goal = await store.has_emergency_goal(account_id)

        result = self.score_engine.score(ledger, month, year, budgets, assets, has_goal)
        logger.info(f"Score for account {account_id} {month}/{year}: {result.score} ({result.level})")
        return ScoreResponse(
            score=result.score,
            max_score=result.max_score,
            level=result.level,
            pillars=[PillarResponse(**p.model_dump()) for p in result.pillars],
        )

    async def get_cash_flow_projection(
        self,
        db: AsyncSession,
        account_id: str,
        months: Optional[int] = None
    ) -> CashFlowProjectionResponse:
        today = self._get_today()
        months_ahead = months or settings.PROJECTION_DEFAULT_MONTHS
        since, _ = trailing_window(today.month, today.year, self.window_months)
        ledger = await LedgerStore(db).load_snapshot(account_id, since=since, until=today)

        projection = project(ledger, today, months_ahead, self.window_months)
        return CashFlowProjectionResponse(
            projections=[
                ProjectionRowResponse(
                    month=row.month,
                    year=row.year,
                    income=_money(row.income),
                    fixed_expense=_money(row.fixed_expense),
                    contribution_expense=_money(row.contribution_expense),
                    avg_variable=_money(row.avg_variable),
                    total_expense=_money(row.total_expense),
                    balance=_money(row.balance),
                    cumulative_balance=_money(row.cumulative_balance),
                )
                for row in projection.projections
            ],
            assumptions=ProjectionAssumptionsResponse(
                fixed_income_total=_money(projection.assumptions.fixed_income_total),
                avg_variable_months=projection.assumptions.avg_variable_months,
                avg_variable_total=_money(projection.assumptions.avg_variable_total),
            ),
        )

    async def get_month_comparison(
        self,
        db: AsyncSession,
        account_id: str,
        month1: int,
        year1: int,
        month2: int,
        year2: int
    ) -> MonthComparisonResponse:
        first = await self.get_month_aggregate(db, account_id, month1, year1)
        second = await self.get_month_aggregate(db, account_id, month2, year2)
        result = compare(first, second)

        return MonthComparisonResponse(
            month1=aggregate_response(result.month1),
            month2=aggregate_response(result.month2),
            changes=[_change_response(c) for c in result.changes],
            biggest_increase=_change_response(result.biggest_increase),
            biggest_saving=_change_response(result.biggest_saving),
        )

    async def get_monthly_evolution(
        self,
        db: AsyncSession,
        account_id: str,
        start: Optional[Tuple[int, int]] = None,
        end: Optional[Tuple[int, int]] = None
    ) -> List[MonthlyEvolutionItem]:
        """Month-by-month totals over an inclusive range, oldest first.

        Defaults to the twelve months ending with the current one.
        """
        today = self._get_today()
        end_month, end_year = end or (today.month, today.year)
        start_month, start_year = start or shift_month(end_month, end_year, -11)

        since = month_range(start_month, start_year)["month_start"]
        until = month_range(end_month, end_year)["month_end"]
        if since > until:
            return []
        ledger = await LedgerStore(db).load_snapshot(account_id, since=since, until=until)

        items: List[MonthlyEvolutionItem] = []
        month, year = start_month, start_year
        while (year, month) <= (end_year, end_month):
            aggregate = compute_month(ledger, month, year)
            items.append(MonthlyEvolutionItem(
                month=month,
                year=year,
                income=_money(aggregate.total_income),
                expenses=_money(aggregate.total_expense),
                balance=_money(aggregate.balance),
            ))
            month, year = shift_month(month, year, 1)
        return items

    async def get_expenses_by_category(
        self,
        db: AsyncSession,
        account_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> ExpensesByCategoryResponse:
        month, year = self._resolve_period(month, year)
        aggregate = await self.get_month_aggregate(db, account_id, month, year)

        buckets = sorted(
            aggregate.by_category.items(),
            key=lambda item: item[1].total,
            reverse=True,
        )
        total = sum((bucket.total for _, bucket in buckets), Decimal("0"))
        return ExpensesByCategoryResponse(
            month=month,
            year=year,
            categories=[
                CategoryExpense(category_id=key, total=_money(bucket.total), count=bucket.count)
                for key, bucket in buckets
            ],
            total=_money(total),
        )
