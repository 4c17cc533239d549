"""
Module: purchasing_engines
Responsibility:
    Package entrypoint re-exporting the pure decision engines: the approval
    state machine, the notification fan-out, FIFO stock planning and
    invoice totals.

Architecture position:
    Engines -- pure decision layer, zero I/O.
    May only import purchasing_kernel.domain and purchasing_kernel.exceptions
    (and sibling engine modules).  MUST NOT import purchasing_services,
    purchasing_config, SQLAlchemy, or kernel db/models/selectors/services.

Invariants enforced:
    - Purity: engines NEVER read the wall clock.  ``now`` is an explicit
      argument supplied by the calling service.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine``, emitting a
    PURCHASING_ENGINE_TRACE record with engine name, version, input
    fingerprint and duration.
"""

from purchasing_engines.approval import (
    apply_action,
    evaluate_action,
    evaluate_submission,
)
from purchasing_engines.fifo import plan_reduction, plan_restoration, total_quantity
from purchasing_engines.invoice_totals import compute_invoice_totals, compute_line_total
from purchasing_engines.notifications import compute_notifications, format_currency
from purchasing_engines.tracer import traced_engine

__all__ = [
    "apply_action",
    "compute_invoice_totals",
    "compute_line_total",
    "compute_notifications",
    "evaluate_action",
    "evaluate_submission",
    "format_currency",
    "plan_reduction",
    "plan_restoration",
    "total_quantity",
    "traced_engine",
]
