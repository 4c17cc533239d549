"""
Module: purchasing_kernel.models.inventory
Responsibility: ORM persistence for stock lots (one row per received
    batch of an item in a store).

Invariants enforced:
    - quantity >= 0: DB check constraint.  FIFO reduction never plans a
      negative lot.
    - Covering index for the oldest-first lot scan per item and store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString

if TYPE_CHECKING:
    from purchasing_kernel.domain.inventory import StockLot


class StockLotModel(CompanyScopedBase):
    __tablename__ = "inventory_mgmt"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_mgmt_quantity_non_negative"),
        Index("ix_inventory_mgmt_fifo", "company_id", "item_id", "store_id", "created_at"),
    )

    item_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    store_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<StockLot item={self.item_id} store={self.store_id} qty={self.quantity}>"

    def to_dto(self) -> StockLot:
        from purchasing_kernel.domain.inventory import StockLot

        return StockLot(
            lot_id=self.id,
            item_id=self.item_id,
            store_id=self.store_id,
            quantity=self.quantity,
            created_at=self.created_at,
        )
