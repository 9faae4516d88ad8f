from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from cofre.core.schemas import CamelModel
from cofre.features.goals.models import GoalType


class GoalCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    type: GoalType = GoalType.CUSTOM
    target_value: Decimal = Field(Decimal("0"), ge=0)
    current_value: Decimal = Field(Decimal("0"), ge=0)
    deadline: Optional[date] = None


class GoalUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    target_value: Optional[Decimal] = Field(None, ge=0)
    current_value: Optional[Decimal] = Field(None, ge=0)
    deadline: Optional[date] = None


class GoalResponse(CamelModel):
    id: UUID
    name: str
    type: GoalType
    target_value: float
    current_value: float
    deadline: Optional[date] = None
    created_at: Optional[datetime] = None
    progress: float


class GoalListResponse(CamelModel):
    goals: List[GoalResponse]
