"""
purchasing_services.inventory_service -- Apply FIFO stock plans to stock lots.

Responsibility:
    Read an item's lots in a store, ask the FIFO engine for a reduction or
    restoration plan and write each lot's new quantity.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

Invariants enforced:
    - Plans are computed before any write; an infeasible reduction raises
      without touching a lot.
    - All lot updates of one call are flushed into the caller's
      transaction, so they land together or not at all.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from purchasing_config.schema import PurchasingSettings
from purchasing_engines.fifo import plan_reduction, plan_restoration
from purchasing_kernel.domain.clock import Clock
from purchasing_kernel.domain.inventory import AdjustmentPlan
from purchasing_kernel.exceptions import NoStockLotsError
from purchasing_kernel.logging_config import get_logger
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_kernel.selectors.inventory_selector import InventorySelector
from purchasing_kernel.services.base import BaseService

logger = get_logger("services.inventory")


class InventoryAdjustmentService(BaseService):

    def __init__(
        self,
        session: Session,
        settings: PurchasingSettings,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.settings = settings
        self.inventory = InventorySelector(session)

    def available_quantity(self, company_id: UUID, item_id: UUID, store_id: UUID) -> int:
        return self.inventory.available_quantity(company_id, item_id, store_id)

    def reduce_fifo(
        self, company_id: UUID, item_id: UUID, store_id: UUID, quantity: int,
    ) -> AdjustmentPlan:
        """Take ``quantity`` units out of the oldest lots first.

        Raises:
            NoStockLotsError: the item has no lots in the store.
            InsufficientStockError: fewer than ``quantity`` units on hand.
        """
        lots = self.inventory.lots_for(company_id, item_id, store_id)
        plan = plan_reduction(
            lots=lots, quantity=quantity, item_id=item_id, store_id=store_id,
        )
        self._apply(plan)
        logger.info(
            "fifo_reduction_completed",
            extra={
                "item_id": str(item_id),
                "store_id": str(store_id),
                "quantity": quantity,
                "lots_updated": len(plan.adjustments),
            },
        )
        return plan

    def restore_fifo(
        self, company_id: UUID, item_id: UUID, store_id: UUID, quantity: int,
    ) -> AdjustmentPlan:
        """Put ``quantity`` units back, oldest lots first.

        Raises:
            NoStockLotsError: the item has no lots in the store.
        """
        lots = self.inventory.lots_for(company_id, item_id, store_id)
        plan = plan_restoration(
            lots=lots,
            quantity=quantity,
            capacity_ceiling=self.settings.inventory.restore_capacity_ceiling,
            item_id=item_id,
            store_id=store_id,
        )
        self._apply(plan)
        logger.info(
            "fifo_restoration_completed",
            extra={
                "item_id": str(item_id),
                "store_id": str(store_id),
                "quantity": quantity,
                "lots_updated": len(plan.adjustments),
            },
        )
        return plan

    def _apply(self, plan: AdjustmentPlan) -> None:
        """Write a plan's new quantities.

        Every lot is loaded before any is changed, so a lot removed since the
        plan was read leaves the others untouched.

        Raises:
            NoStockLotsError: a lot named by the plan no longer exists.
        """
        targets = []
        for adjustment in plan.adjustments:
            lot = self.session.get(StockLotModel, adjustment.lot_id)
            if lot is None:
                logger.warning(
                    "fifo_lot_missing",
                    extra={
                        "lot_id": str(adjustment.lot_id),
                        "item_id": str(plan.item_id),
                        "store_id": str(plan.store_id),
                    },
                )
                raise NoStockLotsError(str(plan.item_id), str(plan.store_id))
            targets.append((lot, adjustment.new_quantity))
        for lot, new_quantity in targets:
            lot.quantity = new_quantity
        if not plan.is_empty:
            self.session.flush()
