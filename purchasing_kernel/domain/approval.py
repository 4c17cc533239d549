"""
Approval action and outcome types (``purchasing_kernel.domain.approval``).

Responsibility
--------------
Inputs and outputs of the approval state machine: who is acting
(``Actor``), what they ask for (``ApprovalAction``), the order snapshot the
decision is made against (``PurchaseOrderState``) and the tagged result
(``ApprovalOutcome``).

Architecture position
---------------------
**Kernel domain layer** -- pure value objects, ZERO I/O.

Outcome kinds
-------------
* ``ADVANCE``  -- approved at level L, order now awaits level L+1.
* ``COMPLETE`` -- approved through the final level; order is done.
* ``REVERT``   -- rejected; order goes back to level L-1, or to its
  creator when L is 1.
* ``REFUSED``  -- the action is not allowed; ``error`` carries the typed
  exception and no entries are produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from uuid import UUID

from purchasing_kernel.domain.ledger import LedgerEntry, finalized_entries
from purchasing_kernel.exceptions import PurchasingError


class ActionType(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


@dataclass(frozen=True)
class Actor:
    """The user performing an approval action."""

    user_id: UUID | None
    role_id: UUID | None
    is_super_admin: bool = False
    display_name: str = ""


@dataclass(frozen=True)
class ApprovalAction:
    kind: ActionType
    actor: Actor
    comment: str = ""

    @classmethod
    def approve(cls, actor: Actor, comment: str = "") -> ApprovalAction:
        return cls(kind=ActionType.APPROVE, actor=actor, comment=comment or "")

    @classmethod
    def reject(cls, actor: Actor, comment: str) -> ApprovalAction:
        return cls(kind=ActionType.REJECT, actor=actor, comment=comment or "")


@dataclass(frozen=True)
class PurchaseOrderState:
    """Workflow-relevant snapshot of a purchase order."""

    order_id: UUID
    po_number: str
    company_id: UUID
    workflow_id: UUID | None
    order_status: UUID | None
    ledger: tuple[LedgerEntry, ...] = ()
    next_level_role_id: UUID | None = None
    created_by: UUID | None = None
    supplier_name: str = ""
    total_value: Decimal = Decimal("0")
    version: int = 1

    @property
    def is_finalized(self) -> bool:
        return bool(finalized_entries(self.ledger))


class OutcomeKind(str, Enum):
    ADVANCE = "advance"
    COMPLETE = "complete"
    REVERT = "revert"
    REFUSED = "refused"


@dataclass(frozen=True)
class ApprovalOutcome:
    """Result of evaluating one action against one order.

    ``from_level`` is the level the action was taken at; ``to_level`` is
    the level now awaiting action (0 when none).  For non-refused outcomes
    ``order_status``, ``workflow_id`` and ``next_level_role_id`` are the
    values to write onto the order.
    """

    kind: OutcomeKind
    action: ApprovalAction
    from_level: int
    to_level: int = 0
    new_entries: tuple[LedgerEntry, ...] = ()
    order_status: UUID | None = None
    workflow_id: UUID | None = None
    next_level_role_id: UUID | None = None
    is_override: bool = False
    error: PurchasingError | None = field(default=None, compare=False)

    @property
    def is_refused(self) -> bool:
        return self.kind is OutcomeKind.REFUSED

    @classmethod
    def refused(
        cls, action: ApprovalAction, error: PurchasingError, from_level: int = 0,
    ) -> ApprovalOutcome:
        return cls(
            kind=OutcomeKind.REFUSED,
            action=action,
            from_level=from_level,
            error=error,
        )

    def ledger_after(self, order: PurchaseOrderState) -> tuple[LedgerEntry, ...]:
        return order.ledger + self.new_entries

    def apply_to(self, order: PurchaseOrderState) -> PurchaseOrderState:
        """Order snapshot after this outcome.  Refused outcomes change nothing."""
        if self.is_refused:
            return order
        return replace(
            order,
            ledger=self.ledger_after(order),
            order_status=self.order_status,
            workflow_id=self.workflow_id,
            next_level_role_id=self.next_level_role_id,
        )


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of submitting (or resubmitting) an order into the workflow.

    ``bypassed`` is True when the process has no configured levels and the
    order is completed without any approver.
    """

    new_entries: tuple[LedgerEntry, ...]
    order_status: UUID
    workflow_id: UUID | None
    next_level_role_id: UUID | None
    bypassed: bool = False
