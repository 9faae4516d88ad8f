from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.database import get_db
from cofre.core.deps import get_account_id
from cofre.features.wallets.schemas import (
    SkipMonthRequest,
    SkipMonthResponse,
    WalletCreate,
    WalletProgressReport,
    WalletResponse,
    WalletTransactionCreate,
    WalletTransactionResponse,
    WalletTransactionResult,
    WalletUpdate,
)
from cofre.features.wallets.service import WalletService

router = APIRouter()


@router.post("", response_model=WalletResponse, status_code=status.HTTP_201_CREATED)
async def create_wallet(
    wallet_data: WalletCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    """Create a savings wallet bounded by an end date or a number of months."""
    return await service.create_wallet(db, account_id, wallet_data)


@router.get("", response_model=List[WalletResponse])
async def list_wallets(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    return await service.list_wallets(db, account_id)


@router.get("/progress", response_model=WalletProgressReport)
async def get_progress_report(
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    return await service.get_progress_report(db, account_id)


@router.patch("/{wallet_id}", response_model=WalletResponse)
async def update_wallet(
    wallet_id: UUID,
    wallet_data: WalletUpdate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    """Edit a wallet; the suggested monthly amount is recomputed."""
    return await service.update_wallet(db, account_id, wallet_id, wallet_data)


@router.delete("/{wallet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wallet(
    wallet_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    await service.delete_wallet(db, account_id, wallet_id)


@router.get("/{wallet_id}/transactions", response_model=List[WalletTransactionResponse])
async def list_transactions(
    wallet_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    return await service.list_transactions(db, account_id, wallet_id)


@router.post(
    "/{wallet_id}/transactions",
    response_model=WalletTransactionResult,
    status_code=status.HTTP_201_CREATED
)
async def add_transaction(
    wallet_id: UUID,
    txn_data: WalletTransactionCreate,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    """Deposit into or withdraw from a wallet."""
    return await service.add_transaction(db, account_id, wallet_id, txn_data)


@router.delete("/{wallet_id}/transactions/{transaction_id}", response_model=WalletResponse)
async def delete_transaction(
    wallet_id: UUID,
    transaction_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    """Delete a transaction; a deposit is taken back out, a withdrawal put back."""
    return await service.delete_transaction(db, account_id, wallet_id, transaction_id)


@router.post("/{wallet_id}/skip-month", response_model=SkipMonthResponse)
async def skip_month(
    wallet_id: UUID,
    period: SkipMonthRequest,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()]
):
    """Suppress the wallet's contribution for one month. Safe to repeat."""
    return await service.set_skip(db, account_id, wallet_id, period.month, period.year, skip=True)


@router.delete("/{wallet_id}/skip-month", response_model=SkipMonthResponse)
async def unskip_month(
    wallet_id: UUID,
    account_id: Annotated[str, Depends(get_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[WalletService, Depends()],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000)
):
    """Restore the wallet's contribution for one month. Safe to repeat."""
    return await service.set_skip(db, account_id, wallet_id, month, year, skip=False)
