import enum
import uuid
from decimal import Decimal
from typing import Optional
from datetime import date, datetime
from sqlalchemy import String, ForeignKey, Numeric, DateTime, Date, Enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from cofre.core.database import Base


class AssetStatus(str, enum.Enum):
    QUITADO = "QUITADO"
    EM_ANDAMENTO = "EM_ANDAMENTO"


class AssetCategory(str, enum.Enum):
    IMOVEL = "IMOVEL"
    VEICULO = "VEICULO"
    POUPANCA = "POUPANCA"
    TESOURO_DIRETO = "TESOURO_DIRETO"
    RENDA_FIXA = "RENDA_FIXA"
    FUNDOS_IMOBILIARIOS = "FUNDOS_IMOBILIARIOS"
    ACOES = "ACOES"
    CRIPTOMOEDAS = "CRIPTOMOEDAS"
    PREVIDENCIA = "PREVIDENCIA"
    INVESTIMENTO = "INVESTIMENTO"
    OUTRO = "OUTRO"


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    category: Mapped[AssetCategory] = mapped_column(Enum(AssetCategory, native_enum=False), nullable=False)
    status: Mapped[AssetStatus] = mapped_column(Enum(AssetStatus, native_enum=False), nullable=False)
    estimated_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    yield_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    wallet_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("wallets.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
