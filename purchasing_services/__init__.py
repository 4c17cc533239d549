"""
purchasing_services -- Package init and public API.

Responsibility:
    Stateful orchestration that composes the pure engines
    (purchasing_engines/) with sessions, selectors and kernel services.
    This is the layer that turns an approval decision or a stock plan into
    database writes.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_import_boundaries.py):
        purchasing_services/ -> purchasing_engines/  (allowed)
        purchasing_services/ -> purchasing_kernel/   (allowed)
        purchasing_engines/  -> purchasing_services/ (FORBIDDEN)
        purchasing_kernel/   -> purchasing_services/ (FORBIDDEN)

Invariants enforced:
    - No service commits.  The caller's ``session_scope()`` owns the
      transaction.
"""

from purchasing_services.approval_orchestrator import ApprovalOrchestrator, ApprovalResult
from purchasing_services.inventory_service import InventoryAdjustmentService
from purchasing_services.invoice_service import InvoiceService, SavedInvoice
from purchasing_services.purchase_order_service import PurchaseOrderService

__all__ = [
    "ApprovalOrchestrator",
    "ApprovalResult",
    "InventoryAdjustmentService",
    "InvoiceService",
    "PurchaseOrderService",
    "SavedInvoice",
]
