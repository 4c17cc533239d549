"""InventorySelector -- stock lots for an item in a store, oldest first."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from purchasing_kernel.domain.inventory import StockLot
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_kernel.selectors.base import BaseSelector


class InventorySelector(BaseSelector):

    def lots_for(self, company_id: UUID, item_id: UUID, store_id: UUID) -> list[StockLot]:
        rows = self.session.scalars(
            select(StockLotModel)
            .where(
                StockLotModel.company_id == company_id,
                StockLotModel.item_id == item_id,
                StockLotModel.store_id == store_id,
            )
            .order_by(StockLotModel.created_at, StockLotModel.id)
        ).all()
        return [row.to_dto() for row in rows]

    def available_quantity(self, company_id: UUID, item_id: UUID, store_id: UUID) -> int:
        total = self.session.scalar(
            select(func.coalesce(func.sum(StockLotModel.quantity), 0)).where(
                StockLotModel.company_id == company_id,
                StockLotModel.item_id == item_id,
                StockLotModel.store_id == store_id,
            )
        )
        return int(total or 0)
