"""
purchasing_engines.notifications -- Pure notification fan-out for approval outcomes.

Responsibility:
    Given an applied approval outcome and the directory facts the caller
    has already read (super admin users, users per role), compute every
    (recipient, message, priority, alert type) to deliver.

Architecture position:
    Engines -- pure, zero I/O.  Role membership is passed in as a mapping;
    this module never queries users.

Invariants enforced:
    - Determinism: the same inputs always yield the same payloads in the
      same order.  Recipient sets are built in insertion order.
    - The acting user never receives a peer, level, stakeholder or creator
      notification; they receive exactly one confirmation.
    - Every rejection message embeds the comment or "No reason provided".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from uuid import UUID

from purchasing_kernel.domain.approval import (
    ActionType,
    ApprovalOutcome,
    OutcomeKind,
    PurchaseOrderState,
)
from purchasing_kernel.domain.ledger import RejectedEntry
from purchasing_kernel.domain.notification import (
    AlertType,
    NotificationPayload,
    NotificationPriority,
)
from purchasing_kernel.domain.workflow import WorkflowDefinition
from purchasing_engines.tracer import traced_engine

_logger = logging.getLogger("purchasing_kernel.engines.notifications")

NO_REASON = "No reason provided"
UNKNOWN_SUPPLIER = "Unknown Supplier"


def format_currency(value: Decimal | int | float | None, symbol: str = "$") -> str:
    return f"{symbol}{Decimal(str(value or 0)):,.2f}"


def _unique(user_ids: Iterable[UUID | None]) -> list[UUID]:
    seen: dict[UUID, None] = {}
    for uid in user_ids:
        if uid is not None and uid not in seen:
            seen[uid] = None
    return list(seen)


class _Builder:
    """Accumulates payloads for one order with shared wording pieces."""

    def __init__(
        self,
        order: PurchaseOrderState,
        actor_name: str,
        currency_symbol: str,
    ):
        self.order = order
        self.actor_name = actor_name
        self.tail = (
            f"for supplier {order.supplier_name or UNKNOWN_SUPPLIER} valued at "
            f"{format_currency(order.total_value, currency_symbol)}"
        )
        self.payloads: list[NotificationPayload] = []

    def add(
        self,
        recipient: UUID,
        message: str,
        priority: NotificationPriority,
        alert_type: AlertType,
    ) -> None:
        self.payloads.append(
            NotificationPayload(
                assign_to=recipient,
                message=message,
                priority=priority,
                alert_type=alert_type,
                entity_id=self.order.po_number,
            )
        )


def _approval_notifications(
    b: _Builder,
    outcome: ApprovalOutcome,
    actor_id: UUID,
    definition: WorkflowDefinition,
    super_admin_users: tuple[UUID, ...],
    role_members: Mapping[UUID, tuple[UUID, ...]],
) -> None:
    po = b.order.po_number
    name = b.actor_name
    medium, high = NotificationPriority.MEDIUM, NotificationPriority.HIGH

    b.add(
        actor_id,
        f"You have successfully approved Purchase Order {po} {b.tail}.",
        medium,
        AlertType.APPROVED,
    )
    for admin in _unique(super_admin_users):
        if admin != actor_id:
            b.add(
                admin,
                f"Purchase Order {po} has been approved by {name} {b.tail}.",
                medium,
                AlertType.APPROVED,
            )

    level = outcome.from_level
    max_level = definition.max_level

    if outcome.is_override:
        for lvl in definition.levels_from(level):
            is_current = lvl.level == level
            is_final = lvl.level == max_level
            if is_current and is_final:
                message = (
                    f"Purchase Order {po} has been approved and completed by Super Admin "
                    f"{name} on your behalf {b.tail}."
                )
            elif is_current:
                message = (
                    f"Purchase Order {po} has been approved by Super Admin {name} on your "
                    f"behalf at Level {lvl.level} {b.tail}. All subsequent levels have "
                    f"also been approved automatically."
                )
            elif is_final:
                message = (
                    f"Purchase Order {po} has been approved and completed by Super Admin "
                    f"{name} on your behalf at Level {lvl.level} {b.tail}."
                )
            else:
                message = (
                    f"Purchase Order {po} has been approved by Super Admin {name} on your "
                    f"behalf at Level {lvl.level} {b.tail}."
                )
            for user in _unique(role_members.get(lvl.role_id, ())):
                if user != actor_id:
                    b.add(
                        user,
                        message,
                        high if is_final else medium,
                        AlertType.COMPLETED if is_final else AlertType.APPROVED,
                    )
        creator = b.order.created_by
        if creator is not None and creator != actor_id:
            b.add(
                creator,
                f"Your Purchase Order {po} has been approved and completed through all "
                f"levels by Super Admin {name} {b.tail}.",
                high,
                AlertType.COMPLETED,
            )
        return

    current_role = definition.role_for_level(level)
    for peer in _unique(role_members.get(current_role, ())):
        if peer != actor_id:
            b.add(
                peer,
                f"Purchase Order {po} has been approved by {name} {b.tail}.",
                medium,
                AlertType.APPROVED,
            )

    if outcome.kind is OutcomeKind.ADVANCE:
        for user in _unique(role_members.get(outcome.next_level_role_id, ())):
            b.add(
                user,
                f"Approval required for Purchase Order {po} approved by {name} {b.tail}.",
                medium,
                AlertType.APPROVAL_REQUESTED,
            )
        return

    stakeholders = [b.order.created_by]
    for role_id in definition.role_ids:
        stakeholders.extend(role_members.get(role_id, ()))
    for user in _unique(stakeholders):
        if user != actor_id:
            b.add(
                user,
                f"Purchase Order {po} has been fully approved and completed by {name} "
                f"{b.tail}.",
                high,
                AlertType.COMPLETED,
            )


def _rejection_notifications(
    b: _Builder,
    outcome: ApprovalOutcome,
    actor_id: UUID,
    super_admin_users: tuple[UUID, ...],
) -> None:
    po = b.order.po_number
    name = b.actor_name
    reason = f"Reason: {outcome.action.comment or NO_REASON}."
    high, rejected = NotificationPriority.HIGH, AlertType.REJECTED

    b.add(actor_id, f"You have rejected Purchase Order {po} {b.tail}. {reason}", high, rejected)
    for admin in _unique(super_admin_users):
        if admin != actor_id:
            b.add(
                admin,
                f"Purchase Order {po} has been rejected by {name} {b.tail}. {reason}",
                high,
                rejected,
            )

    level = outcome.from_level
    creator = b.order.created_by

    if level <= 1:
        if creator is None:
            _logger.warning(
                "rejection_creator_missing",
                extra={"po_number": po, "level": level},
            )
        elif creator != actor_id:
            b.add(
                creator,
                f"Your Purchase Order {po} has been rejected at Level 1 by {name} "
                f"{b.tail}. {reason}",
                high,
                rejected,
            )
        return

    entry = next(
        (e for e in outcome.new_entries if isinstance(e, RejectedEntry)), None,
    )
    previous_approver = entry.rejected_to if entry is not None else None
    if previous_approver is not None and previous_approver != actor_id:
        b.add(
            previous_approver,
            f"Purchase Order {po} that you previously approved has been rejected by "
            f"{name} {b.tail}. {reason}",
            high,
            rejected,
        )
    if creator is not None and creator != actor_id:
        b.add(
            creator,
            f"Your Purchase Order {po} has been rejected at Level {level} by {name} "
            f"{b.tail}. {reason}",
            high,
            rejected,
        )


@traced_engine(
    "approval_notifications", "1.0", fingerprint_fields=("order", "outcome"),
)
def compute_notifications(
    *,
    order: PurchaseOrderState,
    outcome: ApprovalOutcome,
    definition: WorkflowDefinition,
    actor_name: str,
    super_admin_users: tuple[UUID, ...] = (),
    role_members: Mapping[UUID, tuple[UUID, ...]] | None = None,
    currency_symbol: str = "$",
) -> tuple[NotificationPayload, ...]:
    """Payloads for an applied approve/reject outcome.

    ``order`` is the snapshot the action was evaluated against.  Refused
    outcomes produce no notifications.
    """
    if outcome.is_refused:
        return ()
    actor_id = outcome.action.actor.user_id
    builder = _Builder(order, actor_name, currency_symbol)
    if outcome.action.kind is ActionType.APPROVE:
        _approval_notifications(
            builder, outcome, actor_id, definition, super_admin_users, role_members or {},
        )
    else:
        _rejection_notifications(builder, outcome, actor_id, super_admin_users)
    return tuple(builder.payloads)
