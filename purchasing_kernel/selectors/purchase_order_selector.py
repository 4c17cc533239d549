"""PurchaseOrderSelector -- loads order snapshots with their approval ledger."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from purchasing_kernel.domain.approval import PurchaseOrderState
from purchasing_kernel.exceptions import PurchaseOrderNotFoundError
from purchasing_kernel.models.purchase_order import PurchaseOrderModel
from purchasing_kernel.selectors.base import BaseSelector


class PurchaseOrderSelector(BaseSelector):

    def get(self, order_id: UUID) -> PurchaseOrderState:
        model = self.session.get(PurchaseOrderModel, order_id)
        if model is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        return model.to_dto()

    def awaiting_role(self, company_id: UUID, role_id: UUID) -> list[PurchaseOrderState]:
        """Orders whose next approver is ``role_id``, oldest first."""
        rows = self.session.scalars(
            select(PurchaseOrderModel)
            .where(
                PurchaseOrderModel.company_id == company_id,
                PurchaseOrderModel.next_level_role_id == role_id,
                PurchaseOrderModel.workflow_id.is_not(None),
            )
            .order_by(PurchaseOrderModel.created_at, PurchaseOrderModel.po_number)
        ).all()
        return [row.to_dto() for row in rows]
