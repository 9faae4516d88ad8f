import enum
import uuid
from decimal import Decimal
from typing import List, Optional
from datetime import date, datetime
from sqlalchemy import String, ForeignKey, Numeric, Integer, DateTime, Date, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from cofre.core.database import Base


class WalletTransactionType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class Wallet(Base):
    """Savings target with an optional committed monthly contribution.

    ``end_date`` and ``periods_total`` are mutually exclusive bounds.
    """
    __tablename__ = "wallets"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    periods_total: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    monthly_contribution: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    skipped_months: Mapped[List["WalletSkippedMonth"]] = relationship(
        back_populates="wallet", lazy="selectin", cascade="all, delete-orphan"
    )
    transactions: Mapped[List["WalletTransaction"]] = relationship(
        back_populates="wallet", lazy="selectin", cascade="all, delete-orphan",
        order_by="WalletTransaction.occurred_at.desc()"
    )


class WalletSkippedMonth(Base):
    __tablename__ = "wallet_skipped_months"
    __table_args__ = (
        UniqueConstraint("wallet_id", "month", "year", name="uq_wallet_skip_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"))
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    wallet: Mapped["Wallet"] = relationship(back_populates="skipped_months")


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"))
    type: Mapped[WalletTransactionType] = mapped_column(
        Enum(WalletTransactionType, native_enum=False), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    wallet: Mapped["Wallet"] = relationship(back_populates="transactions")
