"""
Module: purchasing_kernel.models.purchase_order
Responsibility: ORM persistence for purchase orders, including the
    approval ledger embedded as an ordered JSON array.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Ledger order: ``approval_status`` is stored and loaded as a list; array
      order is the ledger order.  It is always reassigned as a whole, never
      mutated in place, so change tracking sees every update.
    - Optimistic concurrency: ``version`` is the mapper's version counter.
      Every UPDATE is conditional on the version that was read; a lost race
      raises StaleDataError, translated to ConflictError by services.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString

if TYPE_CHECKING:
    from purchasing_kernel.domain.approval import PurchaseOrderState


class PurchaseOrderModel(CompanyScopedBase):
    __tablename__ = "purchase_order"

    __table_args__ = (
        Index("ix_purchase_order_company_po", "company_id", "po_number", unique=True),
        Index("ix_purchase_order_next_role", "company_id", "next_level_role_id"),
    )

    po_number: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    store_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    total_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_value: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    order_status: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    workflow_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    next_level_role_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    approval_status: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False,
    )
    remarks: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    modified_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    modified_at: Mapped[datetime | None] = mapped_column(nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<PurchaseOrder {self.po_number} v{self.version}>"

    def to_dto(self) -> PurchaseOrderState:
        from purchasing_kernel.domain.approval import PurchaseOrderState
        from purchasing_kernel.domain.ledger import ledger_from_json

        return PurchaseOrderState(
            order_id=self.id,
            po_number=self.po_number,
            company_id=self.company_id,
            workflow_id=self.workflow_id,
            order_status=self.order_status,
            ledger=ledger_from_json(self.approval_status),
            next_level_role_id=self.next_level_role_id,
            created_by=self.created_by,
            supplier_name=self.supplier_name,
            total_value=self.total_value if self.total_value is not None else Decimal("0"),
            version=self.version,
        )
