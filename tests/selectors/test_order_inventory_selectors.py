"""Tests for PurchaseOrderSelector and InventorySelector."""

from uuid import uuid4

import pytest

from purchasing_kernel.domain.ledger import PendingEntry, ledger_to_json
from purchasing_kernel.exceptions import PurchaseOrderNotFoundError
from purchasing_kernel.models.purchase_order import PurchaseOrderModel
from purchasing_kernel.selectors.inventory_selector import InventorySelector
from purchasing_kernel.selectors.purchase_order_selector import PurchaseOrderSelector


def make_order(company, clock, po_number, level=None) -> PurchaseOrderModel:
    ledger = []
    if level is not None:
        ledger = ledger_to_json([
            PendingEntry(level=level, role_id=company.role_for_level(level), sequence_no=0),
        ])
    return PurchaseOrderModel(
        id=uuid4(),
        company_id=company.company_id,
        po_number=po_number,
        created_by=company.users["creator"],
        workflow_id=company.level_config(level) if level else None,
        next_level_role_id=company.role_for_level(level) if level else None,
        approval_status=ledger,
        created_at=clock.tick(),
    )


class TestPurchaseOrderSelector:

    def test_get_returns_snapshot(self, session, company, deterministic_clock):
        model = make_order(company, deterministic_clock, "PO-1", level=1)
        session.add(model)
        session.flush()

        state = PurchaseOrderSelector(session).get(model.id)

        assert state.po_number == "PO-1"
        assert state.workflow_id == company.level_config(1)
        assert state.version == 1
        assert isinstance(state.ledger[0], PendingEntry)

    def test_missing_order(self, session):
        with pytest.raises(PurchaseOrderNotFoundError):
            PurchaseOrderSelector(session).get(uuid4())

    def test_awaiting_role(self, session, company, deterministic_clock):
        session.add_all([
            make_order(company, deterministic_clock, "PO-1", level=2),
            make_order(company, deterministic_clock, "PO-2", level=1),
            make_order(company, deterministic_clock, "PO-3", level=2),
            make_order(company, deterministic_clock, "PO-4"),
        ])
        session.flush()

        waiting = PurchaseOrderSelector(session).awaiting_role(
            company.company_id, company.role_for_level(2),
        )

        assert [o.po_number for o in waiting] == ["PO-1", "PO-3"]


class TestInventorySelector:

    def test_lots_oldest_first(self, session, create_lots):
        company_id, item, store = uuid4(), uuid4(), uuid4()
        ids = create_lots(company_id, item, store, [4, 0, 9])
        create_lots(company_id, item, uuid4(), [100])

        lots = InventorySelector(session).lots_for(company_id, item, store)

        assert [lot.lot_id for lot in lots] == ids
        assert [lot.quantity for lot in lots] == [4, 0, 9]

    def test_available_quantity(self, session, create_lots):
        company_id, item, store = uuid4(), uuid4(), uuid4()
        create_lots(company_id, item, store, [4, 6])

        selector = InventorySelector(session)

        assert selector.available_quantity(company_id, item, store) == 10
        assert selector.available_quantity(company_id, uuid4(), store) == 0
