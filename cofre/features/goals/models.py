import enum
import uuid
from decimal import Decimal
from typing import Optional
from datetime import date, datetime
from sqlalchemy import String, Numeric, DateTime, Date, Enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from cofre.core.database import Base


class GoalType(str, enum.Enum):
    EMERGENCY_FUND = "EMERGENCY_FUND"
    SAVINGS_RATE = "SAVINGS_RATE"
    CUSTOM = "CUSTOM"


class FinancialGoal(Base):
    __tablename__ = "financial_goals"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[GoalType] = mapped_column(Enum(GoalType, native_enum=False), nullable=False)
    target_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    current_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
