from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.ledger.models import EntryKind
from cofre.features.ledger.schemas import (
    AdHocEntryCreate,
    AdHocEntryResponse,
    AdHocEntryUpdate,
    FixedCommitmentCreate,
    FixedCommitmentResponse,
    FixedCommitmentUpdate,
    MarkPaidRequest,
    MonthlyImpactResponse,
    RemindersResponse,
)
from cofre.features.ledger.service import LedgerService

router = APIRouter()


@router.post("/fixed", response_model=FixedCommitmentResponse, status_code=status.HTTP_201_CREATED)
async def create_fixed_commitment(
    entry_data: FixedCommitmentCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    """Create a recurring fixed income or expense."""
    return await service.create_fixed_commitment(db, account_id, entry_data)


@router.get("/fixed", response_model=List[FixedCommitmentResponse])
async def list_fixed_commitments(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()],
    kind: Optional[EntryKind] = Query(None)
):
    return await service.list_fixed_commitments(db, account_id, kind)


@router.get("/fixed/monthly-impact", response_model=MonthlyImpactResponse)
async def get_monthly_impact(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000)
):
    return await service.get_monthly_impact(db, account_id, month, year)


@router.get("/fixed/reminders", response_model=RemindersResponse)
async def get_reminders(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000)
):
    """Fixed expenses with a due day, with their payment status for the month."""
    return await service.get_reminders(db, account_id, month, year)


@router.post("/fixed/{commitment_id}/pay", status_code=status.HTTP_204_NO_CONTENT)
async def mark_paid(
    commitment_id: UUID,
    period: MarkPaidRequest,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    await service.mark_paid(db, account_id, commitment_id, period.month, period.year)


@router.patch("/fixed/{commitment_id}", response_model=FixedCommitmentResponse)
async def update_fixed_commitment(
    commitment_id: UUID,
    entry_data: FixedCommitmentUpdate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    return await service.update_fixed_commitment(db, account_id, commitment_id, entry_data)


@router.delete("/fixed/{commitment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fixed_commitment(
    commitment_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    await service.delete_fixed_commitment(db, account_id, commitment_id)


@router.post("/entries", response_model=AdHocEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_ad_hoc_entry(
    entry_data: AdHocEntryCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    """Record a variable expense (dated) or an extra income (month/year)."""
    return await service.create_ad_hoc_entry(db, account_id, entry_data)


@router.get("/entries", response_model=List[AdHocEntryResponse])
async def list_ad_hoc_entries(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000),
    kind: Optional[EntryKind] = Query(None)
):
    return await service.list_ad_hoc_entries(db, account_id, month, year, kind)


@router.patch("/entries/{entry_id}", response_model=AdHocEntryResponse)
async def update_ad_hoc_entry(
    entry_id: UUID,
    entry_data: AdHocEntryUpdate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    """Edit an entry; changing a variable expense's date moves it to that month."""
    return await service.update_ad_hoc_entry(db, account_id, entry_id, entry_data)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ad_hoc_entry(
    entry_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[LedgerService, Depends()]
):
    await service.delete_ad_hoc_entry(db, account_id, entry_id)
