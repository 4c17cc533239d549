"""
purchasing_engines.invoice_totals -- Sales invoice amount calculation.

Responsibility:
    Compute per-line totals and the invoice header amounts from the
    submitted lines.

Architecture position:
    Engines -- pure, zero I/O.

Invariants enforced:
    - gross = sum(quantity * unit_price) + additional charges
    - discount = sum(quantity * unit_price * discount_pct / 100)
    - net = gross - discount
    - line total = quantity * unit_price * (1 - discount_pct / 100)
    - All amounts are rounded half-up to cents after summing.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from purchasing_kernel.domain.invoice import InvoiceLine, InvoiceTotals
from purchasing_engines.tracer import traced_engine

CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_line_total(line: InvoiceLine) -> Decimal:
    subtotal = Decimal(line.quantity) * Decimal(line.unit_price)
    return _money(subtotal * (1 - Decimal(line.discount_pct) / _HUNDRED))


@traced_engine(
    "invoice_totals", "1.0", fingerprint_fields=("lines", "additional_charges"),
)
def compute_invoice_totals(
    *,
    lines: Sequence[InvoiceLine],
    additional_charges: Decimal = Decimal("0"),
) -> InvoiceTotals:
    """Header amounts and line totals for ``lines``, in input order."""
    gross = Decimal("0")
    discount = Decimal("0")
    for line in lines:
        subtotal = Decimal(line.quantity) * Decimal(line.unit_price)
        gross += subtotal
        discount += subtotal * Decimal(line.discount_pct) / _HUNDRED
    gross += Decimal(additional_charges)

    gross_amount = _money(gross)
    discount_amount = _money(discount)
    return InvoiceTotals(
        gross_amount=gross_amount,
        discount_amount=discount_amount,
        net_amount=gross_amount - discount_amount,
        line_totals=tuple(compute_line_total(line) for line in lines),
    )
