"""
Module: purchasing_kernel.models.invoice
Responsibility: ORM persistence for sales invoices and their lines.  Lines
    are replaced wholesale when an invoice is edited.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString


class SalesInvoiceModel(CompanyScopedBase):
    __tablename__ = "sales_invoice"

    __table_args__ = (
        Index("ix_sales_invoice_company_number", "company_id", "invoice_number", unique=True),
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    store_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gross_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    additional_charges: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    modified_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    modified_at: Mapped[datetime | None] = mapped_column(nullable=True)

    items: Mapped[list["SalesInvoiceItemModel"]] = relationship(
        "SalesInvoiceItemModel",
        back_populates="invoice",
        order_by="SalesInvoiceItemModel.line_no",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<SalesInvoice {self.invoice_number} net={self.net_amount}>"


class SalesInvoiceItemModel(CompanyScopedBase):
    __tablename__ = "sales_invoice_items"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_invoice_items_quantity_positive"),
        Index("ix_sales_invoice_items_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_invoice.id"), nullable=False,
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    discount_pct: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(nullable=False)

    invoice: Mapped["SalesInvoiceModel"] = relationship(
        "SalesInvoiceModel", back_populates="items",
    )

    def __repr__(self) -> str:
        return f"<SalesInvoiceItem {self.item_id} x{self.quantity}>"
