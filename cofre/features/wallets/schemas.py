from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from cofre.core.schemas import CamelModel
from cofre.features.wallets.models import WalletTransactionType


class WalletCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    target_amount: Decimal = Field(..., gt=0)
    end_date: Optional[date] = None
    periods_total: Optional[int] = Field(None, ge=1)
    monthly_contribution: Optional[Decimal] = Field(None, ge=0)


class WalletUpdate(CamelModel):
    """Partial edit. Setting one schedule bound clears the other."""
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    target_amount: Optional[Decimal] = Field(None, gt=0)
    end_date: Optional[date] = None
    periods_total: Optional[int] = Field(None, ge=1)
    monthly_contribution: Optional[Decimal] = Field(None, ge=0)


class SkippedMonthSchema(CamelModel):
    month: int
    year: int


class WalletResponse(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float
    start_date: date
    end_date: Optional[date] = None
    periods_total: Optional[int] = None
    monthly_contribution: Optional[float] = None
    suggested_monthly_amount: float
    months_remaining: int
    progress: int
    skipped_months: List[SkippedMonthSchema] = []
    asset_id: Optional[UUID] = None


class WalletTransactionCreate(CamelModel):
    type: WalletTransactionType
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None


class WalletTransactionResponse(CamelModel):
    id: UUID
    wallet_id: UUID
    type: WalletTransactionType
    amount: float
    description: Optional[str] = None
    occurred_at: Optional[datetime] = None


class WalletTransactionResult(CamelModel):
    transaction: WalletTransactionResponse
    wallet: WalletResponse


class SkipMonthRequest(CamelModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000)


class SkipMonthResponse(CamelModel):
    wallet_id: UUID
    month: int
    year: int
    skipped: bool


class WalletProgressItem(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float
    progress: int
    remaining_amount: float
    deposits: float
    withdrawals: float
    transactions_count: int
    start_date: date
    end_date: Optional[date] = None
    periods_total: Optional[int] = None


class WalletProgressReport(CamelModel):
    piggy_banks: List[WalletProgressItem]
    total: int
    completed: int
    in_progress: int
    not_started: int
