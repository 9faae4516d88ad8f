from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field

from cofre.core.schemas import CamelModel
from cofre.features.assets.models import AssetCategory, AssetStatus


class AssetCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    category: AssetCategory
    status: AssetStatus
    estimated_value: Decimal = Field(..., gt=0)
    yield_rate: Optional[Decimal] = None
    end_date: Optional[date] = None
    monthly_payment: Optional[Decimal] = Field(None, ge=0)


class AssetUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    category: Optional[AssetCategory] = None
    status: Optional[AssetStatus] = None
    estimated_value: Optional[Decimal] = Field(None, gt=0)
    yield_rate: Optional[Decimal] = None
    end_date: Optional[date] = None
    monthly_payment: Optional[Decimal] = Field(None, ge=0)


class LinkedWallet(CamelModel):
    id: UUID
    target_amount: float
    current_amount: float
    monthly_contribution: Optional[float] = None
    progress: int


class AssetResponse(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    category: AssetCategory
    status: AssetStatus
    estimated_value: float
    yield_rate: Optional[float] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    piggy_bank: Optional[LinkedWallet] = None
