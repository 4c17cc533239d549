"""
Tests for FIFO stock planning.

Tests cover:
- plan_reduction: oldest first, skipping empty lots, partial last lot,
  insufficient stock with no partial plan
- plan_restoration: capacity ceiling spill-over, remainder onto oldest lot
- conservation: restore then reduce leaves the lot total unchanged
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from purchasing_engines.fifo import plan_reduction, plan_restoration, total_quantity
from purchasing_kernel.domain.inventory import StockLot
from purchasing_kernel.exceptions import InsufficientStockError, NoStockLotsError

ITEM = uuid4()
STORE = uuid4()
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_lots(*quantities: int) -> list[StockLot]:
    """Lots oldest first, one day apart."""
    return [
        StockLot(
            lot_id=uuid4(),
            item_id=ITEM,
            store_id=STORE,
            quantity=qty,
            created_at=T0 + timedelta(days=i),
        )
        for i, qty in enumerate(quantities)
    ]


def apply(lots, plan) -> list[StockLot]:
    new = {a.lot_id: a.new_quantity for a in plan.adjustments}
    return [
        StockLot(lot.lot_id, lot.item_id, lot.store_id, new.get(lot.lot_id, lot.quantity),
                 lot.created_at)
        for lot in lots
    ]


class TestPlanReduction:

    def test_consumes_oldest_first(self):
        lots = make_lots(5, 10, 10)

        plan = plan_reduction(lots=lots, quantity=12)

        assert [(a.lot_id, a.old_quantity, a.new_quantity) for a in plan.adjustments] == [
            (lots[0].lot_id, 5, 0),
            (lots[1].lot_id, 10, 3),
        ]
        assert plan.total_delta == -12

    def test_input_order_does_not_matter(self):
        lots = make_lots(5, 10)

        plan = plan_reduction(lots=list(reversed(lots)), quantity=6)

        assert plan.adjustments[0].lot_id == lots[0].lot_id
        assert plan.adjustments[0].new_quantity == 0

    def test_empty_lots_are_skipped(self):
        lots = make_lots(0, 4)

        plan = plan_reduction(lots=lots, quantity=3)

        assert [a.lot_id for a in plan.adjustments] == [lots[1].lot_id]
        assert plan.adjustments[0].new_quantity == 1

    def test_exact_quantity_empties_all_lots(self):
        lots = make_lots(2, 3)

        plan = plan_reduction(lots=lots, quantity=5)

        assert [a.new_quantity for a in plan.adjustments] == [0, 0]

    def test_insufficient_stock_raises_before_planning(self):
        lots = make_lots(2, 3)

        with pytest.raises(InsufficientStockError) as exc_info:
            plan_reduction(lots=lots, quantity=6, item_id=ITEM, store_id=STORE)

        assert exc_info.value.available == 5
        assert exc_info.value.required == 6
        assert exc_info.value.item_id == str(ITEM)

    def test_no_lots_raises(self):
        with pytest.raises(NoStockLotsError):
            plan_reduction(lots=[], quantity=1, item_id=ITEM, store_id=STORE)

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_is_empty_plan(self, quantity):
        plan = plan_reduction(lots=make_lots(5), quantity=quantity)

        assert plan.is_empty


class TestPlanRestoration:

    def test_restores_into_oldest_lot(self):
        lots = make_lots(0, 4)

        plan = plan_restoration(lots=lots, quantity=7)

        assert [(a.lot_id, a.new_quantity) for a in plan.adjustments] == [(lots[0].lot_id, 7)]

    def test_spills_over_at_ceiling(self):
        lots = make_lots(8, 3)

        plan = plan_restoration(lots=lots, quantity=5, capacity_ceiling=10)

        assert [(a.old_quantity, a.new_quantity) for a in plan.adjustments] == [(8, 10), (3, 6)]

    def test_full_lots_are_skipped(self):
        lots = make_lots(10, 2)

        plan = plan_restoration(lots=lots, quantity=3, capacity_ceiling=10)

        assert [a.lot_id for a in plan.adjustments] == [lots[1].lot_id]

    def test_remainder_goes_to_oldest_lot_past_ceiling(self):
        lots = make_lots(9, 10)

        plan = plan_restoration(lots=lots, quantity=4, capacity_ceiling=10)

        assert [(a.lot_id, a.new_quantity) for a in plan.adjustments] == [(lots[0].lot_id, 13)]
        assert plan.total_delta == 4

    def test_no_lots_raises(self):
        with pytest.raises(NoStockLotsError):
            plan_restoration(lots=[], quantity=1, item_id=ITEM, store_id=STORE)


class TestConservation:
    """Restoring q then reducing q leaves the total unchanged."""

    @pytest.mark.parametrize("quantities,q", [
        ((5, 10, 0), 7),
        ((0, 0), 3),
        ((999_990, 4), 20),
        ((1,), 1),
    ])
    def test_restore_then_reduce(self, quantities, q):
        lots = make_lots(*quantities)
        before = total_quantity(lots)

        restored = apply(lots, plan_restoration(lots=lots, quantity=q))
        assert total_quantity(restored) == before + q

        reduced = apply(restored, plan_reduction(lots=restored, quantity=q))
        assert total_quantity(reduced) == before
        assert all(lot.quantity >= 0 for lot in reduced)
