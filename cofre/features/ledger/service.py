import logging
import zoneinfo
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.core.config import get_settings
from cofre.features.analytics.aggregator import active_contributions, active_fixed_expenses
from cofre.features.ledger.models import AdHocEntry, EntryKind, FixedCommitment
from cofre.features.ledger.schemas import (
    AdHocEntryCreate,
    AdHocEntryUpdate,
    FixedCommitmentCreate,
    FixedCommitmentUpdate,
    ImpactItem,
    MonthlyImpactResponse,
    ReminderItem,
    ReminderSummary,
    RemindersResponse,
)
from cofre.features.ledger.store import LedgerStore
from cofre.utils.finance_utils import quantize_money, total_amount

settings = get_settings()
logger = logging.getLogger(__name__)

DUE_SOON_DAYS = 3


def reminder_status(due_day: int, is_paid: bool, today: date, month: int, year: int) -> str:
    """paid, upcoming, due_soon or overdue.

    Only the current month can be due soon or overdue; past and future
    months stay ``upcoming`` until paid.
    """
    if is_paid:
        return "paid"
    if (today.month, today.year) != (month, year):
        return "upcoming"
    days_until_due = due_day - today.day
    if days_until_due < 0:
        return "overdue"
    if days_until_due <= DUE_SOON_DAYS:
        return "due_soon"
    return "upcoming"


class LedgerService:
    def __init__(self):
        self._tz = zoneinfo.ZoneInfo(settings.APP_TIMEZONE)

    def _get_today(self) -> date:
        """Get current date in the configured timezone."""
        return datetime.now(self._tz).date()

    async def create_fixed_commitment(
        self,
        db: AsyncSession,
        account_id: str,
        data: FixedCommitmentCreate
    ) -> FixedCommitment:
        commitment = FixedCommitment(account_id=account_id, **data.model_dump())
        db.add(commitment)
        await db.commit()
        await db.refresh(commitment)
        logger.info(f"Created fixed {commitment.kind.value.lower()} for account {account_id}")
        return commitment

    async def list_fixed_commitments(
        self,
        db: AsyncSession,
        account_id: str,
        kind: Optional[EntryKind] = None
    ) -> List[FixedCommitment]:
        stmt = select(FixedCommitment).where(FixedCommitment.account_id == account_id)
        if kind is not None:
            stmt = stmt.where(FixedCommitment.kind == kind)
        stmt = stmt.order_by(FixedCommitment.start_date, FixedCommitment.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def _require_fixed(self, db: AsyncSession, account_id: str, commitment_id: UUID) -> FixedCommitment:
        stmt = select(FixedCommitment).where(
            FixedCommitment.id == commitment_id,
            FixedCommitment.account_id == account_id
        )
        commitment = (await db.execute(stmt)).scalar_one_or_none()
        if not commitment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixed entry not found")
        return commitment

    async def update_fixed_commitment(
        self,
        db: AsyncSession,
        account_id: str,
        commitment_id: UUID,
        data: FixedCommitmentUpdate
    ) -> FixedCommitment:
        commitment = await self._require_fixed(db, account_id, commitment_id)

        update_data = data.model_dump(exclude_unset=True)
        start_date = update_data.get("start_date") or commitment.start_date
        end_date = update_data["end_date"] if "end_date" in update_data else commitment.end_date
        if end_date is not None and end_date < start_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="endDate must not be before startDate"
            )

        for field, value in update_data.items():
            if value is None and field in ("amount", "start_date"):
                continue
            setattr(commitment, field, value)
        await db.commit()
        await db.refresh(commitment)
        logger.info(f"Updated fixed entry {commitment_id}")
        return commitment

    async def delete_fixed_commitment(self, db: AsyncSession, account_id: str, commitment_id: UUID) -> None:
        commitment = await self._require_fixed(db, account_id, commitment_id)
        await db.delete(commitment)
        await db.commit()

    async def create_ad_hoc_entry(
        self,
        db: AsyncSession,
        account_id: str,
        data: AdHocEntryCreate
    ) -> AdHocEntry:
        values = data.model_dump()
        if data.kind == EntryKind.EXPENSE:
            # Variable expenses are placed by their date
            values["month"] = data.entry_date.month
            values["year"] = data.entry_date.year
        else:
            values["entry_date"] = None
        entry = AdHocEntry(account_id=account_id, **values)
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return entry

    async def list_ad_hoc_entries(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int,
        kind: Optional[EntryKind] = None
    ) -> List[AdHocEntry]:
        stmt = (
            select(AdHocEntry)
            .where(AdHocEntry.account_id == account_id)
            .where(AdHocEntry.month == month)
            .where(AdHocEntry.year == year)
        )
        if kind is not None:
            stmt = stmt.where(AdHocEntry.kind == kind)
        stmt = stmt.order_by(AdHocEntry.entry_date, AdHocEntry.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def _require_entry(self, db: AsyncSession, account_id: str, entry_id: UUID) -> AdHocEntry:
        stmt = select(AdHocEntry).where(AdHocEntry.id == entry_id, AdHocEntry.account_id == account_id)
        entry = (await db.execute(stmt)).scalar_one_or_none()
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
        return entry

    async def update_ad_hoc_entry(
        self,
        db: AsyncSession,
        account_id: str,
        entry_id: UUID,
        data: AdHocEntryUpdate
    ) -> AdHocEntry:
        """Variable expenses follow their date; extra incomes take month/year as given."""
        entry = await self._require_entry(db, account_id, entry_id)

        update_data = data.model_dump(exclude_unset=True)
        if entry.kind == EntryKind.EXPENSE:
            update_data.pop("month", None)
            update_data.pop("year", None)
            if update_data.get("entry_date") is not None:
                update_data["month"] = update_data["entry_date"].month
                update_data["year"] = update_data["entry_date"].year
        else:
            update_data.pop("entry_date", None)

        for field, value in update_data.items():
            if value is None and field not in ("description", "category_id"):
                continue
            setattr(entry, field, value)
        await db.commit()
        await db.refresh(entry)
        return entry

    async def delete_ad_hoc_entry(self, db: AsyncSession, account_id: str, entry_id: UUID) -> None:
        entry = await self._require_entry(db, account_id, entry_id)
        await db.delete(entry)
        await db.commit()

    async def get_monthly_impact(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int
    ) -> MonthlyImpactResponse:
        """Fixed expenses plus wallet contributions committed for the month."""
        store = LedgerStore(db)
        expenses = active_fixed_expenses(
            await store.list_fixed_commitments(account_id, EntryKind.EXPENSE), month, year
        )
        contributions = active_contributions(
            await store.list_recurring_contributions(account_id, only_with_schedule=True), month, year
        )
        fixed_total = total_amount(expenses)
        wallet_total = total_amount(contributions, attr="monthly_contribution")

        return MonthlyImpactResponse(
            month=month,
            year=year,
            fixed_total=float(quantize_money(fixed_total)),
            piggy_banks_total=float(quantize_money(wallet_total)),
            total=float(quantize_money(fixed_total + wallet_total)),
            active_expenses=[
                ImpactItem(id=e.id, amount=float(e.amount), description=e.description, category_id=e.category_id)
                for e in expenses
            ],
        )

    async def get_reminders(
        self,
        db: AsyncSession,
        account_id: str,
        month: int,
        year: int
    ) -> RemindersResponse:
        store = LedgerStore(db)
        expenses = [
            e for e in active_fixed_expenses(
                await store.list_fixed_commitments(account_id, EntryKind.EXPENSE), month, year
            )
            if e.due_day is not None
        ]
        expenses.sort(key=lambda e: e.due_day)
        payments = await store.list_payments([e.id for e in expenses], month, year)

        today = self._get_today()
        reminders = [
            ReminderItem(
                id=e.id,
                description=e.description,
                amount=float(e.amount),
                due_day=e.due_day,
                category_id=e.category_id,
                status=reminder_status(e.due_day, e.id in payments, today, month, year),
                is_paid=e.id in payments,
                paid_at=payments.get(e.id),
            )
            for e in expenses
        ]
        return RemindersResponse(
            month=month,
            year=year,
            reminders=reminders,
            summary=ReminderSummary(
                total=len(reminders),
                paid=sum(1 for r in reminders if r.status == "paid"),
                pending=sum(1 for r in reminders if r.status != "paid"),
                overdue=sum(1 for r in reminders if r.status == "overdue"),
                due_soon=sum(1 for r in reminders if r.status == "due_soon"),
            ),
        )

    async def mark_paid(
        self,
        db: AsyncSession,
        account_id: str,
        commitment_id: UUID,
        month: int,
        year: int
    ) -> None:
        """Record the month's payment. Marking twice keeps a single record."""
        stmt = select(FixedCommitment).where(
            FixedCommitment.id == commitment_id,
            FixedCommitment.account_id == account_id,
            FixedCommitment.kind == EntryKind.EXPENSE
        )
        if (await db.execute(stmt)).scalar_one_or_none() is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixed expense not found")
        await LedgerStore(db).upsert_fixed_payment(commitment_id, month, year)
        logger.info(f"Fixed expense {commitment_id} marked paid for {month}/{year}")
