from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.config import get_settings
from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.analytics.schemas import (
    CashFlowProjectionResponse,
    ExpensesByCategoryResponse,
    FinancialHealthResponse,
    MonthComparisonResponse,
    MonthlyEvolutionItem,
    MonthlySummaryResponse,
    ScoreResponse,
)
from cofre.features.analytics.service import AnalyticsService

settings = get_settings()
router = APIRouter()

MonthParam = Annotated[Optional[int], Query(ge=1, le=12)]
YearParam = Annotated[Optional[int], Query(ge=2000)]


@router.get("/monthly-summary", response_model=MonthlySummaryResponse)
async def get_monthly_summary(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    month: MonthParam = None,
    year: YearParam = None
):
    """Income, expenses by source, balance and health for one month."""
    return await service.get_monthly_summary(db, account_id, month, year)


@router.get("/financial-health", response_model=FinancialHealthResponse)
async def get_financial_health(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    month: MonthParam = None,
    year: YearParam = None
):
    return await service.get_financial_health(db, account_id, month, year)


@router.get("/financial-score", response_model=ScoreResponse)
async def get_financial_score(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    month: MonthParam = None,
    year: YearParam = None
):
    """
    Score from 0 to 1000 across five pillars:
    Savings, Budget, Reserve, Diversification, Habits.
    """
    return await service.get_financial_score(db, account_id, month, year)


@router.get("/reports/cash-flow-projection", response_model=CashFlowProjectionResponse)
async def get_cash_flow_projection(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    months: Optional[int] = Query(None, ge=1, le=settings.PROJECTION_MAX_MONTHS)
):
    """Project the next months holding income and variable spend constant."""
    return await service.get_cash_flow_projection(db, account_id, months)


@router.get("/reports/month-comparison", response_model=MonthComparisonResponse)
async def get_month_comparison(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    month1: int = Query(..., ge=1, le=12),
    year1: int = Query(..., ge=2000),
    month2: int = Query(..., ge=1, le=12),
    year2: int = Query(..., ge=2000)
):
    """Per-category changes from month1 to month2, biggest first."""
    return await service.get_month_comparison(db, account_id, month1, year1, month2, year2)


@router.get("/reports/monthly-evolution", response_model=List[MonthlyEvolutionItem])
async def get_monthly_evolution(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    start_month: MonthParam = None,
    start_year: YearParam = None,
    end_month: MonthParam = None,
    end_year: YearParam = None
):
    if (start_month is None) != (start_year is None) or (end_month is None) != (end_year is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Give month and year together for each end of the range"
        )
    start = (start_month, start_year) if start_month is not None else None
    end = (end_month, end_year) if end_month is not None else None
    if start and end and start[::-1] > end[::-1]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start month must not be after end month"
        )
    return await service.get_monthly_evolution(db, account_id, start, end)


@router.get("/reports/expenses-by-category", response_model=ExpensesByCategoryResponse)
async def get_expenses_by_category(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AnalyticsService, Depends()],
    month: MonthParam = None,
    year: YearParam = None
):
    return await service.get_expenses_by_category(db, account_id, month, year)
