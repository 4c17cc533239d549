"""
Stock lot value objects (``purchasing_kernel.domain.inventory``).

A stock lot is one inventory record for an item in a store.  Lots are
consumed and refilled oldest ``created_at`` first.  Quantities are whole
units.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class StockLot:
    lot_id: UUID
    item_id: UUID
    store_id: UUID
    quantity: int
    created_at: datetime


@dataclass(frozen=True)
class LotAdjustment:
    """New quantity for one lot."""

    lot_id: UUID
    old_quantity: int
    new_quantity: int

    @property
    def delta(self) -> int:
        return self.new_quantity - self.old_quantity


@dataclass(frozen=True)
class AdjustmentPlan:
    """Ordered lot updates that together move ``requested`` units."""

    item_id: UUID
    store_id: UUID
    requested: int
    adjustments: tuple[LotAdjustment, ...] = ()

    @property
    def total_delta(self) -> int:
        return sum(a.delta for a in self.adjustments)

    @property
    def is_empty(self) -> bool:
        return not self.adjustments
