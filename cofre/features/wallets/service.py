import logging
import zoneinfo
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.config import get_settings
from cofre.features.assets.models import Asset
from cofre.features.wallets.models import Wallet, WalletTransaction, WalletTransactionType
from cofre.features.wallets.schedule import months_remaining, progress_percentage, suggested_periodic_amount
from cofre.features.wallets.schemas import (
    SkippedMonthSchema,
    SkipMonthResponse,
    WalletCreate,
    WalletProgressItem,
    WalletProgressReport,
    WalletResponse,
    WalletTransactionCreate,
    WalletTransactionResponse,
    WalletTransactionResult,
    WalletUpdate,
)
from cofre.features.wallets.skips import SkipRegistry
from cofre.utils.finance_utils import ZERO, quantize_money, to_decimal, total_amount

settings = get_settings()
logger = logging.getLogger(__name__)


def _check_single_bound(end_date: Optional[date], periods_total: Optional[int]) -> None:
    if end_date is not None and periods_total is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide either endDate or periodsTotal, not both"
        )


class WalletService:
    def __init__(self):
        self._tz = zoneinfo.ZoneInfo(settings.APP_TIMEZONE)

    def _get_today(self) -> date:
        """Get current date in the configured timezone."""
        return datetime.now(self._tz).date()

    def build_wallet(
        self,
        account_id: str,
        name: str,
        target_amount: Decimal,
        description: Optional[str] = None,
        end_date: Optional[date] = None,
        periods_total: Optional[int] = None,
        monthly_contribution: Optional[Decimal] = None
    ) -> Wallet:
        """Unsaved wallet starting today. Callers own the commit."""
        _check_single_bound(end_date, periods_total)
        return Wallet(
            account_id=account_id,
            name=name,
            description=description,
            target_amount=target_amount,
            current_amount=ZERO,
            start_date=self._get_today(),
            end_date=end_date,
            periods_total=periods_total,
            monthly_contribution=monthly_contribution or None,
            skipped_months=[],
            transactions=[],
        )

    def to_response(self, wallet: Wallet, asset_id: Optional[UUID] = None) -> WalletResponse:
        remaining = months_remaining(
            self._get_today(), wallet.start_date, wallet.end_date, wallet.periods_total
        )
        suggestion = suggested_periodic_amount(wallet.target_amount, wallet.current_amount, remaining)
        return WalletResponse(
            id=wallet.id,
            name=wallet.name,
            description=wallet.description,
            target_amount=float(to_decimal(wallet.target_amount)),
            current_amount=float(to_decimal(wallet.current_amount)),
            start_date=wallet.start_date,
            end_date=wallet.end_date,
            periods_total=wallet.periods_total,
            monthly_contribution=(
                float(wallet.monthly_contribution) if wallet.monthly_contribution is not None else None
            ),
            suggested_monthly_amount=float(quantize_money(suggestion)),
            months_remaining=remaining,
            progress=progress_percentage(wallet.current_amount, wallet.target_amount),
            skipped_months=[
                SkippedMonthSchema(month=s.month, year=s.year)
                for s in sorted(wallet.skipped_months, key=lambda s: (s.year, s.month))
            ],
            asset_id=asset_id,
        )

    async def create_wallet(
        self,
        db: AsyncSession,
        account_id: str,
        data: WalletCreate
    ) -> WalletResponse:
        wallet = self.build_wallet(
            account_id,
            name=data.name,
            target_amount=data.target_amount,
            description=data.description,
            end_date=data.end_date,
            periods_total=data.periods_total,
            monthly_contribution=data.monthly_contribution,
        )
        db.add(wallet)
        await db.commit()
        logger.info(f"Created wallet '{wallet.name}' for account {account_id}")
        return self.to_response(wallet)

    async def get_wallet(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID
    ) -> Optional[Tuple[Wallet, Optional[UUID]]]:
        stmt = (
            select(Wallet, Asset.id)
            .outerjoin(Asset, Asset.wallet_id == Wallet.id)
            .where(Wallet.id == wallet_id, Wallet.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def _require_wallet(self, db: AsyncSession, account_id: str, wallet_id: UUID):
        found = await self.get_wallet(db, account_id, wallet_id)
        if not found:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
        return found

    async def list_wallets(self, db: AsyncSession, account_id: str) -> List[WalletResponse]:
        stmt = (
            select(Wallet, Asset.id)
            .outerjoin(Asset, Asset.wallet_id == Wallet.id)
            .where(Wallet.account_id == account_id)
            .order_by(Wallet.created_at.desc(), Wallet.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return [self.to_response(wallet, asset_id) for wallet, asset_id in result.all()]

    async def update_wallet(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID,
        data: WalletUpdate
    ) -> WalletResponse:
        wallet, asset_id = await self._require_wallet(db, account_id, wallet_id)

        update_data = data.model_dump(exclude_unset=True)
        _check_single_bound(update_data.get("end_date"), update_data.get("periods_total"))
        if update_data.get("end_date") is not None:
            update_data["periods_total"] = None
        elif update_data.get("periods_total") is not None:
            update_data["end_date"] = None
        if "monthly_contribution" in update_data:
            update_data["monthly_contribution"] = update_data["monthly_contribution"] or None

        for field, value in update_data.items():
            if value is None and field in ("name", "target_amount"):
                continue
            setattr(wallet, field, value)

        await db.commit()
        logger.info(f"Updated wallet {wallet_id}")
        return self.to_response(wallet, asset_id)

    async def add_transaction(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID,
        data: WalletTransactionCreate
    ) -> WalletTransactionResult:
        """Deposit or withdraw; withdrawals never take the balance below zero."""
        wallet, asset_id = await self._require_wallet(db, account_id, wallet_id)

        current = to_decimal(wallet.current_amount)
        if data.type == WalletTransactionType.DEPOSIT:
            wallet.current_amount = current + data.amount
        else:
            wallet.current_amount = max(ZERO, current - data.amount)

        txn = WalletTransaction(
            wallet_id=wallet.id,
            type=data.type,
            amount=data.amount,
            description=data.description,
            occurred_at=datetime.now(timezone.utc),
        )
        wallet.transactions.insert(0, txn)
        await db.commit()
        logger.info(f"{data.type.value} of {data.amount} on wallet {wallet_id}")

        return WalletTransactionResult(
            transaction=WalletTransactionResponse.model_validate(txn),
            wallet=self.to_response(wallet, asset_id),
        )

    async def delete_transaction(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID,
        transaction_id: UUID
    ) -> WalletResponse:
        """Remove a transaction and reverse its effect on the balance."""
        wallet, asset_id = await self._require_wallet(db, account_id, wallet_id)
        txn = next((t for t in wallet.transactions if t.id == transaction_id), None)
        if txn is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")

        current = to_decimal(wallet.current_amount)
        if txn.type == WalletTransactionType.DEPOSIT:
            wallet.current_amount = max(ZERO, current - to_decimal(txn.amount))
        else:
            wallet.current_amount = current + to_decimal(txn.amount)

        wallet.transactions.remove(txn)
        await db.commit()
        logger.info(f"Deleted {txn.type.value} {transaction_id} from wallet {wallet_id}")
        return self.to_response(wallet, asset_id)

    async def list_transactions(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID
    ) -> List[WalletTransactionResponse]:
        wallet, _ = await self._require_wallet(db, account_id, wallet_id)
        return [WalletTransactionResponse.model_validate(t) for t in wallet.transactions]

    async def set_skip(
        self,
        db: AsyncSession,
        account_id: str,
        wallet_id: UUID,
        month: int,
        year: int,
        skip: bool
    ) -> SkipMonthResponse:
        await self._require_wallet(db, account_id, wallet_id)
        skipped = await SkipRegistry(db).toggle_skip(wallet_id, month, year, skip)
        return SkipMonthResponse(wallet_id=wallet_id, month=month, year=year, skipped=skipped)

    async def delete_wallet(self, db: AsyncSession, account_id: str, wallet_id: UUID) -> None:
        wallet, asset_id = await self._require_wallet(db, account_id, wallet_id)
        if asset_id is not None:
            asset = await db.get(Asset, asset_id)
            asset.wallet_id = None
            await db.flush()
        await db.delete(wallet)
        await db.commit()
        logger.info(f"Deleted wallet {wallet_id}")

    async def get_progress_report(self, db: AsyncSession, account_id: str) -> WalletProgressReport:
        stmt = (
            select(Wallet)
            .where(Wallet.account_id == account_id)
            .order_by(Wallet.created_at.desc(), Wallet.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)

        items: List[WalletProgressItem] = []
        for wallet in result.scalars().all():
            target = to_decimal(wallet.target_amount)
            current = to_decimal(wallet.current_amount)
            deposits = total_amount(t for t in wallet.transactions if t.type == WalletTransactionType.DEPOSIT)
            withdrawals = total_amount(t for t in wallet.transactions if t.type == WalletTransactionType.WITHDRAWAL)
            items.append(WalletProgressItem(
                id=wallet.id,
                name=wallet.name,
                description=wallet.description,
                target_amount=float(target),
                current_amount=float(current),
                progress=progress_percentage(current, target),
                remaining_amount=float(max(ZERO, target - current)),
                deposits=float(deposits),
                withdrawals=float(withdrawals),
                transactions_count=len(wallet.transactions),
                start_date=wallet.start_date,
                end_date=wallet.end_date,
                periods_total=wallet.periods_total,
            ))

        return WalletProgressReport(
            piggy_banks=items,
            total=len(items),
            completed=sum(1 for i in items if i.progress >= 100),
            in_progress=sum(1 for i in items if 0 < i.progress < 100),
            not_started=sum(1 for i in items if i.progress == 0),
        )
