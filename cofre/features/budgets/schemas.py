from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import Field

from cofre.core.schemas import CamelModel


class BudgetUpsert(CamelModel):
    category_id: str = Field(..., min_length=1)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000)
    amount: Decimal = Field(..., ge=0)


class BudgetResponse(CamelModel):
    id: UUID
    category_id: str
    month: int
    year: int
    amount: float


class BudgetStatusItem(CamelModel):
    id: UUID
    category_id: str
    budget: float
    actual: float
    remaining: float
    percentage: float
    status: str


class BudgetStatusResponse(CamelModel):
    month: int
    year: int
    budgets: List[BudgetStatusItem]
    total_budget: float
    total_actual: float
