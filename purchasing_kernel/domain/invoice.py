"""Sales invoice line and totals value objects."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class InvoiceLine:
    item_id: UUID
    quantity: int
    unit_price: Decimal
    discount_pct: Decimal = Decimal("0")


@dataclass(frozen=True)
class InvoiceTotals:
    gross_amount: Decimal
    discount_amount: Decimal
    net_amount: Decimal
    line_totals: tuple[Decimal, ...] = ()
