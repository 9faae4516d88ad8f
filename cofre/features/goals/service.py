import logging
import zoneinfo
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.config import get_settings
from cofre.features.analytics.aggregator import compute_month
from cofre.features.analytics.averages import trailing_window
from cofre.features.analytics.score import emergency_reserve
from cofre.features.goals.models import FinancialGoal, GoalType
from cofre.features.goals.schemas import GoalCreate, GoalListResponse, GoalResponse, GoalUpdate
from cofre.features.ledger.schemas import AssetSnapshot, LedgerSnapshot
from cofre.features.ledger.store import LedgerStore
from cofre.utils.finance_utils import ZERO, month_range, quantize_money, to_decimal

settings = get_settings()
logger = logging.getLogger(__name__)

TENTH = Decimal("0.1")


class GoalService:
    def __init__(self):
        self._tz = zoneinfo.ZoneInfo(settings.APP_TIMEZONE)

    def _get_today(self) -> date:
        """Get current date in the configured timezone."""
        return datetime.now(self._tz).date()

    def _computed_values(
        self,
        goal: FinancialGoal,
        ledger: LedgerSnapshot,
        assets: List[AssetSnapshot],
        today: date
    ):
        """(target, current) for a goal; emergency and savings-rate goals derive theirs."""
        target = to_decimal(goal.target_value)
        current = to_decimal(goal.current_value)

        if goal.type == GoalType.EMERGENCY_FUND:
            reserve = emergency_reserve(
                ledger,
                assets,
                today.month,
                today.year,
                window_months=settings.TRAILING_AVERAGE_MONTHS,
                reserve_months=settings.EMERGENCY_RESERVE_MONTHS,
            )
            target = quantize_money(reserve.target)
            current = quantize_money(reserve.current)
        elif goal.type == GoalType.SAVINGS_RATE:
            aggregate = compute_month(ledger, today.month, today.year)
            if aggregate.total_income > 0:
                rate = (aggregate.total_income - aggregate.total_expense) / aggregate.total_income * 100
            else:
                rate = ZERO
            current = rate.quantize(TENTH, rounding=ROUND_HALF_UP)
        return target, current

    def _to_response(self, goal: FinancialGoal, target: Decimal, current: Decimal) -> GoalResponse:
        progress = ZERO
        if target > 0:
            progress = min((current / target * 100).quantize(TENTH, rounding=ROUND_HALF_UP), Decimal("100"))
        return GoalResponse(
            id=goal.id,
            name=goal.name,
            type=goal.type,
            target_value=float(target),
            current_value=float(current),
            deadline=goal.deadline,
            created_at=goal.created_at,
            progress=float(progress),
        )

    async def list_goals(self, db: AsyncSession, account_id: str) -> GoalListResponse:
        stmt = (
            select(FinancialGoal)
            .where(FinancialGoal.account_id == account_id)
            .order_by(FinancialGoal.created_at, FinancialGoal.id)
        )
        goals = list((await db.execute(stmt)).scalars().all())
        if not goals:
            return GoalListResponse(goals=[])

        today = self._get_today()
        store = LedgerStore(db)
        since, _ = trailing_window(today.month, today.year, settings.TRAILING_AVERAGE_MONTHS)
        ledger = await store.load_snapshot(account_id, since=since, until=month_range(today.month, today.year)["month_end"])
        assets = await store.list_assets(account_id)

        responses = []
        for goal in goals:
            target, current = self._computed_values(goal, ledger, assets, today)
            responses.append(self._to_response(goal, target, current))
        return GoalListResponse(goals=responses)

    async def _require_goal(self, db: AsyncSession, account_id: str, goal_id: UUID) -> FinancialGoal:
        stmt = select(FinancialGoal).where(FinancialGoal.id == goal_id, FinancialGoal.account_id == account_id)
        goal = (await db.execute(stmt)).scalar_one_or_none()
        if not goal:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
        return goal

    async def create_goal(self, db: AsyncSession, account_id: str, data: GoalCreate) -> GoalResponse:
        goal = FinancialGoal(account_id=account_id, **data.model_dump())
        db.add(goal)
        await db.commit()
        await db.refresh(goal)
        logger.info(f"Created {goal.type.value} goal '{goal.name}' for account {account_id}")
        return self._to_response(goal, to_decimal(goal.target_value), to_decimal(goal.current_value))

    async def update_goal(
        self,
        db: AsyncSession,
        account_id: str,
        goal_id: UUID,
        data: GoalUpdate
    ) -> GoalResponse:
        goal = await self._require_goal(db, account_id, goal_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field != "deadline":
                continue
            setattr(goal, field, value)
        await db.commit()
        await db.refresh(goal)
        return self._to_response(goal, to_decimal(goal.target_value), to_decimal(goal.current_value))

    async def delete_goal(self, db: AsyncSession, account_id: str, goal_id: UUID) -> None:
        goal = await self._require_goal(db, account_id, goal_id)
        await db.delete(goal)
        await db.commit()
        logger.info(f"Deleted goal {goal_id}")
