from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.goals.schemas import GoalCreate, GoalListResponse, GoalResponse, GoalUpdate
from cofre.features.goals.service import GoalService

router = APIRouter()


@router.get("", response_model=GoalListResponse)
async def list_goals(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[GoalService, Depends()]
):
    """
    List goals. Emergency-fund targets and savings-rate values are
    computed from the ledger on every call.
    """
    return await service.list_goals(db, account_id)


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_data: GoalCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[GoalService, Depends()]
):
    return await service.create_goal(db, account_id, goal_data)


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: UUID,
    goal_data: GoalUpdate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[GoalService, Depends()]
):
    return await service.update_goal(db, account_id, goal_id, goal_data)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[GoalService, Depends()]
):
    await service.delete_goal(db, account_id, goal_id)
