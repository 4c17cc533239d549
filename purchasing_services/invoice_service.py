"""
purchasing_services.invoice_service -- Create or edit a sales invoice with stock movement.

Responsibility:
    Save an invoice header and its lines, computing totals with the
    invoice engine, and move stock through FIFO lots: an edit first gives
    back every quantity the previous version took, then the new lines are
    taken out again.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

Invariants enforced:
    - Restore before reduce: on edit the previous quantities are returned
      to the old store's lots before the new lines are reduced, so an
      unchanged invoice re-saves against the same stock.
    - One transaction: header, lines, system log and every lot update are
      flushed into the caller's transaction.  A stock error part way
      through leaves the caller to roll the whole save back.

Failure modes:
    - InvalidInvoiceError -- no lines, non-positive quantity, negative
      price or a discount outside 0..100.
    - InvoiceNotFoundError -- editing an unknown invoice.
    - NoStockLotsError / InsufficientStockError -- from FIFO planning.
    - NetworkError -- any database failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from purchasing_config.schema import PurchasingSettings
from purchasing_engines.invoice_totals import compute_invoice_totals
from purchasing_kernel.domain.clock import Clock
from purchasing_kernel.domain.inventory import AdjustmentPlan
from purchasing_kernel.domain.invoice import InvoiceLine, InvoiceTotals
from purchasing_kernel.exceptions import (
    InvalidInvoiceError,
    InvoiceNotFoundError,
    NetworkError,
)
from purchasing_kernel.logging_config import LogContext, get_logger
from purchasing_kernel.models.invoice import SalesInvoiceItemModel, SalesInvoiceModel
from purchasing_kernel.services.base import BaseService
from purchasing_kernel.services.system_log_service import (
    SCOPE_ADD,
    SCOPE_EDIT,
    SystemLogService,
)
from purchasing_services.inventory_service import InventoryAdjustmentService

logger = get_logger("services.invoice")


@dataclass(frozen=True)
class SavedInvoice:
    invoice_id: UUID
    invoice_number: str
    totals: InvoiceTotals
    restorations: tuple[AdjustmentPlan, ...] = ()
    reductions: tuple[AdjustmentPlan, ...] = ()
    is_edit: bool = False


def _quantities_by_item(pairs) -> dict[UUID, int]:
    totals: dict[UUID, int] = {}
    for item_id, quantity in pairs:
        totals[item_id] = totals.get(item_id, 0) + quantity
    return totals


def _validate(invoice_number: str, lines: Sequence[InvoiceLine]) -> None:
    if not lines:
        raise InvalidInvoiceError(invoice_number, "at least one line is required")
    for line in lines:
        if line.quantity <= 0:
            raise InvalidInvoiceError(
                invoice_number, f"quantity for item {line.item_id} must be positive",
            )
        if Decimal(line.unit_price) < 0:
            raise InvalidInvoiceError(
                invoice_number, f"unit price for item {line.item_id} must not be negative",
            )
        if not Decimal("0") <= Decimal(line.discount_pct) <= Decimal("100"):
            raise InvalidInvoiceError(
                invoice_number, f"discount for item {line.item_id} must be within 0-100",
            )


class InvoiceService(BaseService):

    def __init__(
        self,
        session: Session,
        settings: PurchasingSettings,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.settings = settings
        self.inventory = InventoryAdjustmentService(session, settings, self.clock)
        self.system_log = SystemLogService(session, self.clock)

    def save_invoice(
        self,
        *,
        company_id: UUID,
        store_id: UUID,
        invoice_number: str,
        invoice_date: date,
        lines: Sequence[InvoiceLine],
        actor_id: UUID,
        invoice_id: UUID | None = None,
        customer_name: str = "",
        customer_phone: str | None = None,
        additional_charges: Decimal = Decimal("0"),
    ) -> SavedInvoice:
        """Create the invoice, or replace invoice ``invoice_id`` when given."""
        _validate(invoice_number, lines)
        with LogContext.bind(actor_id=actor_id, company_id=company_id):
            try:
                return self._save(
                    company_id=company_id,
                    store_id=store_id,
                    invoice_number=invoice_number,
                    invoice_date=invoice_date,
                    lines=lines,
                    actor_id=actor_id,
                    invoice_id=invoice_id,
                    customer_name=customer_name,
                    customer_phone=customer_phone,
                    additional_charges=additional_charges,
                )
            except SQLAlchemyError as exc:
                logger.error(
                    "invoice_save_failed",
                    extra={"invoice_number": invoice_number},
                    exc_info=True,
                )
                raise NetworkError("save invoice", str(exc)) from exc

    def _save(
        self,
        *,
        company_id: UUID,
        store_id: UUID,
        invoice_number: str,
        invoice_date: date,
        lines: Sequence[InvoiceLine],
        actor_id: UUID,
        invoice_id: UUID | None,
        customer_name: str,
        customer_phone: str | None,
        additional_charges: Decimal,
    ) -> SavedInvoice:
        now = self.clock.now()
        totals = compute_invoice_totals(lines=lines, additional_charges=additional_charges)
        restorations: list[AdjustmentPlan] = []

        if invoice_id is not None:
            model = self.session.get(SalesInvoiceModel, invoice_id)
            if model is None or model.company_id != company_id:
                raise InvoiceNotFoundError(str(invoice_id))
            previous = _quantities_by_item((i.item_id, i.quantity) for i in model.items)
            for item_id, quantity in previous.items():
                restorations.append(
                    self.inventory.restore_fifo(company_id, item_id, model.store_id, quantity)
                )
            model.items.clear()
            self.session.flush()
            model.modified_by = actor_id
            model.modified_at = now
        else:
            model = SalesInvoiceModel(
                id=uuid4(),
                company_id=company_id,
                created_by=actor_id,
                created_at=now,
            )
            self.session.add(model)

        model.invoice_number = invoice_number
        model.invoice_date = invoice_date
        model.store_id = store_id
        model.customer_name = customer_name
        model.customer_phone = customer_phone
        model.gross_amount = totals.gross_amount
        model.additional_charges = Decimal(additional_charges)
        model.discount_amount = totals.discount_amount
        model.net_amount = totals.net_amount
        for line_no, (line, line_total) in enumerate(zip(lines, totals.line_totals), start=1):
            model.items.append(
                SalesInvoiceItemModel(
                    company_id=company_id,
                    line_no=line_no,
                    item_id=line.item_id,
                    quantity=line.quantity,
                    unit_price=Decimal(line.unit_price),
                    discount_pct=Decimal(line.discount_pct),
                    line_total=line_total,
                    created_at=now,
                )
            )
        self.session.flush()

        is_edit = invoice_id is not None
        self.system_log.record(
            company_id=company_id,
            module=self.settings.inventory.invoice_audit_module,
            scope=SCOPE_EDIT if is_edit else SCOPE_ADD,
            key=invoice_number,
            message=f"Invoice: {invoice_number} {'updated' if is_edit else 'created'}.",
            action_by=actor_id,
        )

        requested = _quantities_by_item((line.item_id, line.quantity) for line in lines)
        reductions = [
            self.inventory.reduce_fifo(company_id, item_id, store_id, quantity)
            for item_id, quantity in requested.items()
        ]

        logger.info(
            "invoice_saved",
            extra={
                "invoice_number": invoice_number,
                "is_edit": is_edit,
                "line_count": len(lines),
                "net_amount": str(totals.net_amount),
            },
        )
        return SavedInvoice(
            invoice_id=model.id,
            invoice_number=invoice_number,
            totals=totals,
            restorations=tuple(restorations),
            reductions=tuple(reductions),
            is_edit=is_edit,
        )
