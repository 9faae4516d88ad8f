from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.budgets.schemas import BudgetResponse, BudgetStatusResponse, BudgetUpsert
from cofre.features.budgets.service import BudgetService

router = APIRouter()


@router.put("", response_model=BudgetResponse)
async def upsert_budget(
    budget_data: BudgetUpsert,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BudgetService, Depends()]
):
    """Create or replace the ceiling for a category in a month."""
    return await service.upsert_budget(db, account_id, budget_data)


@router.get("", response_model=List[BudgetResponse])
async def list_budgets(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BudgetService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000)
):
    return await service.list_budgets(db, account_id, month, year)


@router.get("/status", response_model=BudgetStatusResponse)
async def get_budget_status(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BudgetService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000)
):
    return await service.get_budget_status(db, account_id, month, year)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BudgetService, Depends()]
):
    await service.delete_budget(db, account_id, budget_id)
