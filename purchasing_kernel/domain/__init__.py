"""
Pure domain layer.

Immutable value objects for the approval workflow, notifications and stock
lots, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time
- I/O
"""

from purchasing_kernel.domain.approval import (
    ActionType,
    Actor,
    ApprovalAction,
    ApprovalOutcome,
    OutcomeKind,
    PurchaseOrderState,
    SubmissionOutcome,
)
from purchasing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from purchasing_kernel.domain.inventory import AdjustmentPlan, LotAdjustment, StockLot
from purchasing_kernel.domain.invoice import InvoiceLine, InvoiceTotals
from purchasing_kernel.domain.ledger import (
    ApprovalTrail,
    ApprovedEntry,
    LedgerEntry,
    PendingEntry,
    RejectedEntry,
)
from purchasing_kernel.domain.notification import (
    AlertType,
    NotificationPayload,
    NotificationPriority,
    NotificationStatus,
)
from purchasing_kernel.domain.status import StatusCatalog, StatusMessage
from purchasing_kernel.domain.workflow import WorkflowDefinition, WorkflowLevel

__all__ = [
    "ActionType",
    "Actor",
    "AdjustmentPlan",
    "AlertType",
    "ApprovalAction",
    "ApprovalOutcome",
    "ApprovalTrail",
    "ApprovedEntry",
    "Clock",
    "InvoiceLine",
    "InvoiceTotals",
    "DeterministicClock",
    "LedgerEntry",
    "LotAdjustment",
    "NotificationPayload",
    "NotificationPriority",
    "NotificationStatus",
    "OutcomeKind",
    "PendingEntry",
    "PurchaseOrderState",
    "RejectedEntry",
    "StatusCatalog",
    "StatusMessage",
    "StockLot",
    "SubmissionOutcome",
    "SystemClock",
    "WorkflowDefinition",
    "WorkflowLevel",
]
