from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.assets.models import AssetCategory, AssetStatus
from cofre.features.assets.schemas import AssetCreate, AssetResponse, AssetUpdate
from cofre.features.assets.service import AssetService

router = APIRouter()


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset_data: AssetCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AssetService, Depends()]
):
    """Register an asset. Assets still being paid off get a linked wallet."""
    return await service.create_asset(db, account_id, asset_data)


@router.get("", response_model=List[AssetResponse])
async def list_assets(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AssetService, Depends()],
    category: Optional[AssetCategory] = Query(None),
    asset_status: Optional[AssetStatus] = Query(None, alias="status")
):
    return await service.list_assets(
        db,
        account_id,
        category=category.value if category else None,
        asset_status=asset_status.value if asset_status else None,
    )


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: UUID,
    asset_data: AssetUpdate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AssetService, Depends()]
):
    return await service.update_asset(db, account_id, asset_id, asset_data)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(
    asset_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[AssetService, Depends()]
):
    await service.delete_asset(db, account_id, asset_id)
