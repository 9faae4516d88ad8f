from datetime import date, datetime
from decimal import Decimal
from typing import FrozenSet, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from cofre.core.schemas import CamelModel
from cofre.features.ledger.models import EntryKind


# --- Read snapshots handed to the aggregation engine ---

class FixedCommitmentSnapshot(BaseModel):
    id: UUID
    account_id: str
    kind: EntryKind
    amount: Decimal
    start_date: date
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    due_day: Optional[int] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True


class AdHocEntrySnapshot(BaseModel):
    id: UUID
    account_id: str
    kind: EntryKind
    amount: Decimal
    entry_date: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None
    category_id: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True


class RecurringContributionSnapshot(BaseModel):
    """A wallet as seen by the engine, skip exceptions folded in."""
    id: UUID
    account_id: str
    name: str = ""
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    start_date: date
    end_date: Optional[date] = None
    periods_total: Optional[int] = None
    monthly_contribution: Optional[Decimal] = None
    skipped: FrozenSet[Tuple[int, int]] = frozenset()
    linked_asset_id: Optional[UUID] = None

    class Config:
        from_attributes = True
        frozen = True

    @property
    def is_linked(self) -> bool:
        return self.linked_asset_id is not None

    def is_skipped(self, month: int, year: int) -> bool:
        return (month, year) in self.skipped


class CategoryBudgetSnapshot(BaseModel):
    category_id: str
    account_id: str
    month: int
    year: int
    amount: Decimal

    class Config:
        from_attributes = True
        frozen = True


class AssetSnapshot(BaseModel):
    id: UUID
    account_id: str
    category: str
    status: str
    estimated_value: Decimal
    wallet_id: Optional[UUID] = None

    class Config:
        from_attributes = True
        frozen = True


class LedgerSnapshot(BaseModel):
    """Everything the Aggregator needs for one account."""
    account_id: str
    fixed_incomes: List[FixedCommitmentSnapshot] = []
    fixed_expenses: List[FixedCommitmentSnapshot] = []
    extra_incomes: List[AdHocEntrySnapshot] = []
    variable_expenses: List[AdHocEntrySnapshot] = []
    contributions: List[RecurringContributionSnapshot] = []

    class Config:
        frozen = True


# --- API payloads for ledger entries ---

class FixedCommitmentCreate(CamelModel):
    kind: EntryKind
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    start_date: date
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    due_day: Optional[int] = Field(None, ge=1, le=31)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class FixedCommitmentUpdate(CamelModel):
    """Partial edit; the kind of a commitment is fixed at creation."""
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    due_day: Optional[int] = Field(None, ge=1, le=31)


class FixedCommitmentResponse(CamelModel):
    id: UUID
    kind: EntryKind
    description: Optional[str] = None
    amount: float
    start_date: date
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    due_day: Optional[int] = None
    created_at: Optional[datetime] = None


class AdHocEntryCreate(CamelModel):
    """Variable expenses carry ``date``; extra incomes carry ``month``/``year``."""
    kind: EntryKind
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    entry_date: Optional[date] = Field(None, alias="date")
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000)
    category_id: Optional[str] = None

    @field_validator("category_id")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode="after")
    def check_period(self):
        if self.kind == EntryKind.EXPENSE and self.entry_date is None:
            raise ValueError("variable expenses need a date")
        if self.kind == EntryKind.INCOME and (self.month is None or self.year is None):
            raise ValueError("extra incomes need month and year")
        return self


class AdHocEntryUpdate(CamelModel):
    """Partial edit. A new ``date`` moves a variable expense to that month."""
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    entry_date: Optional[date] = Field(None, alias="date")
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000)
    category_id: Optional[str] = None

    @field_validator("category_id")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class AdHocEntryResponse(CamelModel):
    id: UUID
    kind: EntryKind
    description: Optional[str] = None
    amount: float
    entry_date: Optional[date] = Field(None, serialization_alias="date")
    month: Optional[int] = None
    year: Optional[int] = None
    category_id: Optional[str] = None


class ReminderItem(CamelModel):
    id: UUID
    description: Optional[str] = None
    amount: float
    due_day: int
    category_id: Optional[str] = None
    status: str
    is_paid: bool
    paid_at: Optional[datetime] = None


class ReminderSummary(CamelModel):
    total: int
    paid: int
    pending: int
    overdue: int
    due_soon: int


class RemindersResponse(CamelModel):
    month: int
    year: int
    reminders: List[ReminderItem]
    summary: ReminderSummary


class ImpactItem(CamelModel):
    id: UUID
    amount: float
    description: Optional[str] = None
    category_id: Optional[str] = None


class MonthlyImpactResponse(CamelModel):
    month: int
    year: int
    fixed_total: float
    piggy_banks_total: float
    total: float
    active_expenses: List[ImpactItem]


class MarkPaidRequest(CamelModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000)
