"""Tests for InventoryAdjustmentService against persisted stock lots."""

from dataclasses import replace
from datetime import timedelta
from uuid import uuid4

import pytest

from purchasing_config.schema import InventorySettings
from purchasing_kernel.domain.inventory import StockLot
from purchasing_kernel.exceptions import InsufficientStockError, NoStockLotsError
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_services.inventory_service import InventoryAdjustmentService


@pytest.fixture
def service(session, settings, deterministic_clock):
    return InventoryAdjustmentService(session, settings, deterministic_clock)


@pytest.fixture
def stock(create_lots):
    """One item in one store with lots of 5, 0 and 10 units, oldest first."""
    company_id, item_id, store_id = uuid4(), uuid4(), uuid4()
    lot_ids = create_lots(company_id, item_id, store_id, [5, 0, 10])
    return company_id, item_id, store_id, lot_ids


def quantities(session, lot_ids):
    return [session.get(StockLotModel, lot_id).quantity for lot_id in lot_ids]


class TestReduce:

    def test_reduces_oldest_lots_first(self, session, service, stock):
        company_id, item_id, store_id, lot_ids = stock

        plan = service.reduce_fifo(company_id, item_id, store_id, 8)

        assert quantities(session, lot_ids) == [0, 0, 7]
        assert plan.total_delta == -8
        assert service.available_quantity(company_id, item_id, store_id) == 7

    def test_insufficient_stock_changes_nothing(self, session, service, stock):
        company_id, item_id, store_id, lot_ids = stock

        with pytest.raises(InsufficientStockError):
            service.reduce_fifo(company_id, item_id, store_id, 16)

        assert quantities(session, lot_ids) == [5, 0, 10]

    def test_unknown_item(self, service, stock):
        company_id, _, store_id, _ = stock

        with pytest.raises(NoStockLotsError):
            service.reduce_fifo(company_id, uuid4(), store_id, 1)


class TestVanishedLot:
    """A lot deleted between reading the lots and writing them."""

    def test_missing_lot_raises_and_writes_nothing(
        self, session, service, stock, monkeypatch, captured_logs,
    ):
        company_id, item_id, store_id, lot_ids = stock
        read_lots = service.inventory.lots_for

        def with_deleted_lot(*args):
            lots = read_lots(*args)
            gone = StockLot(
                lot_id=uuid4(),
                item_id=item_id,
                store_id=store_id,
                quantity=3,
                created_at=lots[0].created_at - timedelta(days=1),
            )
            return [gone, *lots]

        monkeypatch.setattr(service.inventory, "lots_for", with_deleted_lot)

        with pytest.raises(NoStockLotsError) as exc_info:
            service.reduce_fifo(company_id, item_id, store_id, 6)

        assert exc_info.value.item_id == str(item_id)
        assert quantities(session, lot_ids) == [5, 0, 10]
        assert [r["message"] for r in captured_logs()].count("fifo_lot_missing") == 1


class TestRestore:

    def test_restores_into_oldest_lot(self, session, service, stock):
        company_id, item_id, store_id, lot_ids = stock

        service.restore_fifo(company_id, item_id, store_id, 4)

        assert quantities(session, lot_ids) == [9, 0, 10]

    def test_configured_ceiling(self, session, settings, deterministic_clock, stock):
        company_id, item_id, store_id, lot_ids = stock
        capped = replace(settings, inventory=InventorySettings(restore_capacity_ceiling=10))
        service = InventoryAdjustmentService(session, capped, deterministic_clock)

        service.restore_fifo(company_id, item_id, store_id, 12)

        assert quantities(session, lot_ids) == [10, 7, 10]

    def test_restore_then_reduce_conserves_stock(self, service, stock):
        company_id, item_id, store_id, _ = stock
        before = service.available_quantity(company_id, item_id, store_id)

        service.restore_fifo(company_id, item_id, store_id, 6)
        service.reduce_fifo(company_id, item_id, store_id, 6)

        assert service.available_quantity(company_id, item_id, store_id) == before

    def test_completion_is_logged(self, service, stock, captured_logs):
        company_id, item_id, store_id, _ = stock

        service.restore_fifo(company_id, item_id, store_id, 2)

        records = [r for r in captured_logs() if r["message"] == "fifo_restoration_completed"]
        assert records[0]["quantity"] == 2
        assert records[0]["lots_updated"] == 1
