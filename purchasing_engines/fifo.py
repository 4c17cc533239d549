"""
purchasing_engines.fifo -- Oldest-lot-first stock reduction and restoration plans.

Responsibility:
    Turn a list of stock lots and a quantity into the ordered lot updates
    that consume (invoice line) or give back (invoice edit) that quantity.
    Applying the plan is the caller's job.

Architecture position:
    Engines -- pure, zero I/O.

Invariants enforced:
    - Lots are walked in ``created_at`` order, oldest first, whatever order
      they are passed in.
    - Reduction checks total availability BEFORE building any adjustment;
      an infeasible request yields no partial plan.
    - Restoration fills each lot up to the capacity ceiling and puts any
      remainder on the oldest lot, so the full quantity always returns.
    - Conservation: restoring q then reducing q leaves the lot total
      unchanged.

Failure modes:
    - NoStockLotsError when the item has no lots in the store.
    - InsufficientStockError when total available is below the quantity.
"""

from __future__ import annotations

from collections.abc import Sequence

from purchasing_kernel.domain.inventory import AdjustmentPlan, LotAdjustment, StockLot
from purchasing_kernel.exceptions import InsufficientStockError, NoStockLotsError
from purchasing_engines.tracer import traced_engine

DEFAULT_CAPACITY_CEILING = 999_999


def _oldest_first(lots: Sequence[StockLot]) -> list[StockLot]:
    return sorted(lots, key=lambda lot: (lot.created_at, str(lot.lot_id)))


def total_quantity(lots: Sequence[StockLot]) -> int:
    return sum(max(lot.quantity, 0) for lot in lots)


@traced_engine("fifo_reduction", "1.0", fingerprint_fields=("lots", "quantity"))
def plan_reduction(
    *,
    lots: Sequence[StockLot],
    quantity: int,
    item_id=None,
    store_id=None,
) -> AdjustmentPlan:
    """Consume ``quantity`` units oldest lot first.

    Lots already at zero are skipped.  Whole lots are emptied until one lot
    can cover the remainder, which is reduced partially.
    """
    ordered = _oldest_first(lots)
    item_id = item_id if item_id is not None else (ordered[0].item_id if ordered else None)
    store_id = store_id if store_id is not None else (ordered[0].store_id if ordered else None)

    if quantity <= 0:
        return AdjustmentPlan(item_id=item_id, store_id=store_id, requested=quantity)
    if not ordered:
        raise NoStockLotsError(str(item_id), str(store_id))

    available = total_quantity(ordered)
    if available < quantity:
        raise InsufficientStockError(str(item_id), str(store_id), available, quantity)

    remaining = quantity
    adjustments: list[LotAdjustment] = []
    for lot in ordered:
        if remaining == 0:
            break
        if lot.quantity <= 0:
            continue
        take = min(lot.quantity, remaining)
        adjustments.append(
            LotAdjustment(
                lot_id=lot.lot_id,
                old_quantity=lot.quantity,
                new_quantity=lot.quantity - take,
            )
        )
        remaining -= take

    return AdjustmentPlan(
        item_id=item_id,
        store_id=store_id,
        requested=quantity,
        adjustments=tuple(adjustments),
    )


@traced_engine("fifo_restoration", "1.0", fingerprint_fields=("lots", "quantity"))
def plan_restoration(
    *,
    lots: Sequence[StockLot],
    quantity: int,
    capacity_ceiling: int = DEFAULT_CAPACITY_CEILING,
    item_id=None,
    store_id=None,
) -> AdjustmentPlan:
    """Give back ``quantity`` units oldest lot first.

    Each lot is filled up to ``capacity_ceiling``, overflow spilling into
    the next lot.  Whatever is left after every lot is full goes onto the
    oldest lot regardless of the ceiling.
    """
    ordered = _oldest_first(lots)
    item_id = item_id if item_id is not None else (ordered[0].item_id if ordered else None)
    store_id = store_id if store_id is not None else (ordered[0].store_id if ordered else None)

    if quantity <= 0:
        return AdjustmentPlan(item_id=item_id, store_id=store_id, requested=quantity)
    if not ordered:
        raise NoStockLotsError(str(item_id), str(store_id))

    remaining = quantity
    new_quantities: dict = {}
    for lot in ordered:
        if remaining == 0:
            break
        room = capacity_ceiling - lot.quantity
        if room <= 0:
            continue
        add = min(room, remaining)
        new_quantities[lot.lot_id] = lot.quantity + add
        remaining -= add

    if remaining > 0:
        oldest = ordered[0]
        base = new_quantities.get(oldest.lot_id, oldest.quantity)
        new_quantities[oldest.lot_id] = base + remaining

    adjustments = tuple(
        LotAdjustment(
            lot_id=lot.lot_id,
            old_quantity=lot.quantity,
            new_quantity=new_quantities[lot.lot_id],
        )
        for lot in ordered
        if lot.lot_id in new_quantities
    )
    return AdjustmentPlan(
        item_id=item_id,
        store_id=store_id,
        requested=quantity,
        adjustments=adjustments,
    )
