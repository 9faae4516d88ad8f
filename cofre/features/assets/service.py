import logging
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofre.features.assets.models import Asset, AssetStatus
from cofre.features.assets.schemas import AssetCreate, AssetResponse, AssetUpdate, LinkedWallet
from cofre.features.wallets.models import Wallet
from cofre.features.wallets.schedule import progress_percentage
from cofre.features.wallets.service import WalletService
from cofre.utils.finance_utils import to_decimal

logger = logging.getLogger(__name__)

WALLET_NAME_PREFIX = "Patrimônio: "


class AssetService:
    """Assets and the wallet that finances an asset still being paid off.

    ``EM_ANDAMENTO`` assets own a wallet whose target tracks the asset's
    value; ``QUITADO`` assets keep the wallet's history but no schedule.
    """

    def __init__(self):
        self.wallet_service = WalletService()

    async def _to_response(self, db: AsyncSession, asset: Asset) -> AssetResponse:
        linked = None
        if asset.wallet_id is not None:
            wallet = await db.get(Wallet, asset.wallet_id)
            if wallet is not None:
                linked = LinkedWallet(
                    id=wallet.id,
                    target_amount=float(to_decimal(wallet.target_amount)),
                    current_amount=float(to_decimal(wallet.current_amount)),
                    monthly_contribution=(
                        float(wallet.monthly_contribution) if wallet.monthly_contribution is not None else None
                    ),
                    progress=progress_percentage(wallet.current_amount, wallet.target_amount),
                )
        return AssetResponse(
            id=asset.id,
            name=asset.name,
            description=asset.description,
            category=asset.category,
            status=asset.status,
            estimated_value=float(to_decimal(asset.estimated_value)),
            yield_rate=float(asset.yield_rate) if asset.yield_rate is not None else None,
            end_date=asset.end_date,
            created_at=asset.created_at,
            piggy_bank=linked,
        )

    async def get_asset(self, db: AsyncSession, account_id: str, asset_id: UUID) -> Optional[Asset]:
        stmt = select(Asset).where(Asset.id == asset_id, Asset.account_id == account_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_asset(self, db: AsyncSession, account_id: str, asset_id: UUID) -> Asset:
        asset = await self.get_asset(db, account_id, asset_id)
        if not asset:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
        return asset

    async def list_assets(
        self,
        db: AsyncSession,
        account_id: str,
        category: Optional[str] = None,
        asset_status: Optional[str] = None
    ) -> List[AssetResponse]:
        stmt = select(Asset).where(Asset.account_id == account_id)
        if category:
            stmt = stmt.where(Asset.category == category)
        if asset_status:
            stmt = stmt.where(Asset.status == asset_status)
        stmt = stmt.order_by(Asset.created_at.desc(), Asset.id)

        result = await db.execute(stmt)
        return [await self._to_response(db, a) for a in result.scalars().all()]

    async def create_asset(self, db: AsyncSession, account_id: str, data: AssetCreate) -> AssetResponse:
        asset = Asset(
            account_id=account_id,
            name=data.name,
            description=data.description,
            category=data.category,
            status=data.status,
            estimated_value=data.estimated_value,
            yield_rate=data.yield_rate,
            end_date=data.end_date,
        )

        if data.status == AssetStatus.EM_ANDAMENTO:
            wallet = self.wallet_service.build_wallet(
                account_id,
                name=f"{WALLET_NAME_PREFIX}{data.name}",
                target_amount=data.estimated_value,
                description=data.description,
                monthly_contribution=data.monthly_payment,
            )
            db.add(wallet)
            await db.flush()
            asset.wallet_id = wallet.id

        db.add(asset)
        await db.commit()
        await db.refresh(asset)
        logger.info(f"Created asset '{asset.name}' ({asset.status.value}) for account {account_id}")
        return await self._to_response(db, asset)

    async def update_asset(
        self,
        db: AsyncSession,
        account_id: str,
        asset_id: UUID,
        data: AssetUpdate
    ) -> AssetResponse:
        asset = await self._require_asset(db, account_id, asset_id)
        changes = data.model_dump(exclude_unset=True)
        monthly_payment = changes.pop("monthly_payment", None)

        previous_status = asset.status
        for field, value in changes.items():
            if value is None and field in ("name", "category", "status", "estimated_value"):
                continue
            setattr(asset, field, value)

        wallet = await db.get(Wallet, asset.wallet_id) if asset.wallet_id else None

        if asset.status == AssetStatus.QUITADO:
            if wallet is not None:
                # Paid off: keep the balance history, stop the schedule
                wallet.monthly_contribution = None
        elif wallet is None:
            wallet = self.wallet_service.build_wallet(
                account_id,
                name=f"{WALLET_NAME_PREFIX}{asset.name}",
                target_amount=asset.estimated_value,
                description=asset.description,
                monthly_contribution=monthly_payment,
            )
            db.add(wallet)
            await db.flush()
            asset.wallet_id = wallet.id
        else:
            wallet.name = f"{WALLET_NAME_PREFIX}{asset.name}"
            wallet.description = asset.description
            wallet.target_amount = asset.estimated_value
            if "monthly_payment" in data.model_fields_set:
                wallet.monthly_contribution = monthly_payment or None

        await db.commit()
        await db.refresh(asset)
        logger.info(f"Updated asset {asset_id}: {previous_status.value} -> {asset.status.value}")
        return await self._to_response(db, asset)

    async def delete_asset(self, db: AsyncSession, account_id: str, asset_id: UUID) -> None:
        """Delete the asset, then the wallet it was linked to."""
        asset = await self._require_asset(db, account_id, asset_id)
        wallet_id = asset.wallet_id

        if wallet_id is not None:
            asset.wallet_id = None
            await db.flush()
        await db.delete(asset)

        if wallet_id is not None:
            wallet = await db.get(Wallet, wallet_id)
            if wallet is not None:
                await db.delete(wallet)

        await db.commit()
        logger.info(f"Deleted asset {asset_id}")
