"""
Tests for InvoiceService.

Tests cover:
- Creating an invoice: header amounts, lines, system log, FIFO reduction
- Editing: previous quantities restored before the new lines are reduced
- Store changes on edit
- Validation and stock failures
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from purchasing_kernel.domain.invoice import InvoiceLine
from purchasing_kernel.exceptions import (
    InsufficientStockError,
    InvalidInvoiceError,
    InvoiceNotFoundError,
)
from purchasing_kernel.models.audit import SystemLogModel
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_kernel.models.invoice import SalesInvoiceModel
from purchasing_services.invoice_service import InvoiceService

INVOICE_DATE = date(2024, 1, 15)


@pytest.fixture
def service(session, settings, deterministic_clock):
    return InvoiceService(session, settings, deterministic_clock)


@pytest.fixture
def shop(create_lots):
    """A company with two items stocked in the main store."""
    company_id, store_id = uuid4(), uuid4()
    widget, gadget = uuid4(), uuid4()
    lots = {
        widget: create_lots(company_id, widget, store_id, [3, 10]),
        gadget: create_lots(company_id, gadget, store_id, [4]),
    }
    return company_id, store_id, widget, gadget, lots


def line(item_id, quantity, price="10.00", discount="0") -> InvoiceLine:
    return InvoiceLine(
        item_id=item_id,
        quantity=quantity,
        unit_price=Decimal(price),
        discount_pct=Decimal(discount),
    )


def quantities(session, lot_ids):
    return [session.get(StockLotModel, lot_id).quantity for lot_id in lot_ids]


def save(service, shop, lines, **kwargs):
    company_id, store_id, *_ = shop
    options = {"store_id": store_id, "invoice_number": "INV-1", **kwargs}
    return service.save_invoice(
        company_id=company_id,
        invoice_date=INVOICE_DATE,
        lines=lines,
        actor_id=uuid4(),
        **options,
    )


class TestCreateInvoice:

    def test_header_and_lines(self, session, service, shop):
        _, _, widget, gadget, _ = shop

        saved = save(
            service, shop,
            [line(widget, 2, "10.00", "10"), line(gadget, 1, "5.00")],
            additional_charges=Decimal("3.00"),
            customer_name="Jordan Buyer",
        )

        model = session.get(SalesInvoiceModel, saved.invoice_id)
        assert model.gross_amount == Decimal("28.00")
        assert model.discount_amount == Decimal("2.00")
        assert model.net_amount == Decimal("26.00")
        assert [(i.line_no, i.item_id, i.line_total) for i in model.items] == [
            (1, widget, Decimal("18.00")),
            (2, gadget, Decimal("5.00")),
        ]
        assert not saved.is_edit

    def test_stock_reduced_oldest_first(self, session, service, shop):
        _, _, widget, gadget, lots = shop

        save(service, shop, [line(widget, 4), line(gadget, 1)])

        assert quantities(session, lots[widget]) == [0, 9]
        assert quantities(session, lots[gadget]) == [3]

    def test_repeated_item_lines_are_combined(self, session, service, shop):
        _, _, widget, _, lots = shop

        saved = save(service, shop, [line(widget, 2), line(widget, 2)])

        assert len(saved.reductions) == 1
        assert saved.reductions[0].requested == 4
        assert quantities(session, lots[widget]) == [0, 9]

    def test_creation_is_logged(self, session, service, shop):
        _, _, widget, _, _ = shop

        save(service, shop, [line(widget, 1)], invoice_number="INV-LOG")

        row = session.scalars(select(SystemLogModel).where(SystemLogModel.key == "INV-LOG")).one()
        assert (row.module, row.scope, row.log) == ("Sales Invoice", "Add", "Invoice: INV-LOG created.")


class TestEditInvoice:

    def test_edit_restores_then_reduces(self, session, service, shop):
        _, _, widget, gadget, lots = shop
        saved = save(service, shop, [line(widget, 5)])
        assert quantities(session, lots[widget]) == [0, 8]

        edited = save(service, shop, [line(widget, 2), line(gadget, 4)], invoice_id=saved.invoice_id)

        assert edited.is_edit
        assert [p.requested for p in edited.restorations] == [5]
        assert quantities(session, lots[widget]) == [3, 8]
        assert quantities(session, lots[gadget]) == [0]
        model = session.get(SalesInvoiceModel, saved.invoice_id)
        assert [i.item_id for i in model.items] == [widget, gadget]

    def test_unchanged_resave_keeps_stock(self, session, service, shop):
        _, _, widget, _, lots = shop
        saved = save(service, shop, [line(widget, 13)])

        save(service, shop, [line(widget, 13)], invoice_id=saved.invoice_id)

        assert quantities(session, lots[widget]) == [0, 0]

    def test_edit_can_move_store(self, session, service, shop, create_lots):
        company_id, _, widget, _, lots = shop
        other_store = uuid4()
        other_lots = create_lots(company_id, widget, other_store, [6])
        saved = save(service, shop, [line(widget, 3)])

        save(service, shop, [line(widget, 2)], invoice_id=saved.invoice_id, store_id=other_store)

        assert quantities(session, lots[widget]) == [3, 10]
        assert quantities(session, other_lots) == [4]

    def test_edit_is_logged(self, session, service, shop):
        _, _, widget, _, _ = shop
        saved = save(service, shop, [line(widget, 1)], invoice_number="INV-E")

        save(service, shop, [line(widget, 1)], invoice_number="INV-E", invoice_id=saved.invoice_id)

        rows = session.scalars(
            select(SystemLogModel)
            .where(SystemLogModel.key == "INV-E")
            .order_by(SystemLogModel.created_at)
        ).all()
        assert [r.scope for r in rows] == ["Add", "Edit"]
        assert rows[-1].log == "Invoice: INV-E updated."

    def test_unknown_invoice(self, service, shop):
        _, _, widget, _, _ = shop

        with pytest.raises(InvoiceNotFoundError):
            save(service, shop, [line(widget, 1)], invoice_id=uuid4())


class TestFailures:

    @pytest.mark.parametrize("lines", [
        [],
        [InvoiceLine(item_id=uuid4(), quantity=0, unit_price=Decimal("1"))],
        [InvoiceLine(item_id=uuid4(), quantity=1, unit_price=Decimal("-1"))],
        [InvoiceLine(item_id=uuid4(), quantity=1, unit_price=Decimal("1"),
                     discount_pct=Decimal("120"))],
    ])
    def test_invalid_lines(self, service, shop, lines):
        with pytest.raises(InvalidInvoiceError):
            save(service, shop, lines)

    def test_insufficient_stock(self, service, shop):
        _, _, widget, _, _ = shop

        with pytest.raises(InsufficientStockError) as exc_info:
            save(service, shop, [line(widget, 14)])

        assert exc_info.value.available == 13
