import enum
import uuid
from decimal import Decimal
from typing import Optional
from datetime import date, datetime
from sqlalchemy import String, ForeignKey, Numeric, Integer, DateTime, Date, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from cofre.core.database import Base


class EntryKind(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class FixedCommitment(Base):
    """Recurring fixed income or expense.

    Incomes count in every month; expenses only inside ``[start_date, end_date]``.
    """
    __tablename__ = "fixed_commitments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    kind: Mapped[EntryKind] = mapped_column(Enum(EntryKind, native_enum=False), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    category_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    due_day: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class AdHocEntry(Base):
    """Variable expense (dated) or extra income (tagged with month/year)."""
    __tablename__ = "ad_hoc_entries"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    kind: Mapped[EntryKind] = mapped_column(Enum(EntryKind, native_enum=False), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    entry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class FixedExpensePayment(Base):
    __tablename__ = "fixed_expense_payments"
    __table_args__ = (
        UniqueConstraint("fixed_commitment_id", "month", "year", name="uq_fixed_payment_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    fixed_commitment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("fixed_commitments.id", ondelete="CASCADE")
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
