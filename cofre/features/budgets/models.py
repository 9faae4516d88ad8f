import uuid
from decimal import Decimal
from datetime import datetime
from sqlalchemy import String, Numeric, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from cofre.core.database import Base


class CategoryBudget(Base):
    """Monthly spending ceiling for one category, unique per period."""
    __tablename__ = "category_budgets"
    __table_args__ = (
        UniqueConstraint("account_id", "category_id", "month", "year", name="uq_category_budget_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    category_id: Mapped[str] = mapped_column(String, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
