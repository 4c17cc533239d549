"""
purchasing_engines.approval -- Pure approval workflow state machine.

Responsibility:
    Given an order snapshot, its process's workflow definition, the status
    catalog and an approve/reject action, compute the ledger entries to
    append and the order pointers to write.  Also computes the initial
    pending entry when an order is submitted into the workflow.

Architecture position:
    Engines -- pure decision layer, zero I/O.  ``now`` is passed in by the
    caller; no clock, session or config is touched here.

Invariants enforced:
    - Sequence numbers continue from ``max(existing, default -1) + 1`` and
      are gap-free within one action's batch.
    - At most one entry per order is ever finalized: approving requires an
      active level, and completion clears the workflow pointer.
    - After any action the workflow pointer names a configured level or is
      None.
    - Every refusal is decided before any entry is built, so a refused
      action produces nothing to write.

Failure modes:
    ``evaluate_action`` never raises for business refusals; it returns a
    ``REFUSED`` outcome carrying the typed error.  ``apply_action`` raises
    that error instead.  ``evaluate_submission`` raises directly.
"""

from __future__ import annotations

from datetime import datetime

from purchasing_kernel.domain.approval import (
    ActionType,
    ApprovalAction,
    ApprovalOutcome,
    OutcomeKind,
    PurchaseOrderState,
    SubmissionOutcome,
)
from purchasing_kernel.domain.ledger import (
    ApprovedEntry,
    LedgerEntry,
    PendingEntry,
    RejectedEntry,
    latest_approver,
    next_sequence_no,
)
from purchasing_kernel.domain.status import StatusCatalog
from purchasing_kernel.domain.workflow import WorkflowDefinition, WorkflowLevel
from purchasing_kernel.exceptions import (
    MissingActorContextError,
    MissingCommentError,
    OrderNotAwaitingApprovalError,
    OrderNotSubmittableError,
    PermissionDeniedError,
    PurchasingError,
    WorkflowConfigurationError,
)
from purchasing_engines.tracer import traced_engine

OVERRIDE_COMMENT = "Super Admin Override - Level {level}"
OVERRIDE_FINAL_COMMENT = "Super Admin Override - Final Approval"


def _current_level(
    order: PurchaseOrderState, definition: WorkflowDefinition,
) -> WorkflowLevel:
    """Config row the order's workflow pointer names.

    Raises:
        OrderNotAwaitingApprovalError: pointer is None.
        WorkflowConfigurationError: pointer names no configured level.
    """
    if order.workflow_id is None:
        reason = "already completed" if order.is_finalized else "no active approval level"
        raise OrderNotAwaitingApprovalError(order.po_number, reason)
    level = definition.level_of(order.workflow_id)
    if level is None:
        raise WorkflowConfigurationError(
            definition.process_name,
            f"workflow config {order.workflow_id} is not an active level",
        )
    return definition.at_level(level)


def _require_actor(action: ApprovalAction) -> None:
    if action.actor.user_id is None:
        raise MissingActorContextError("user_id")
    if action.actor.role_id is None:
        raise MissingActorContextError("role_id")


# ---------------------------------------------------------------------------
# Approve
# ---------------------------------------------------------------------------


def _approve(
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    action: ApprovalAction,
    statuses: StatusCatalog,
    now: datetime,
) -> ApprovalOutcome:
    _require_actor(action)
    actor = action.actor
    current = _current_level(order, definition)
    level = current.level
    max_level = definition.max_level
    seq = next_sequence_no(order.ledger)

    if actor.is_super_admin and current.override_enabled:
        return _override(order, definition, action, statuses, now, current, seq)

    if actor.role_id != current.role_id:
        raise PermissionDeniedError(str(actor.user_id), level, str(current.role_id))

    if level == max_level:
        entry = ApprovedEntry(
            level=level,
            role_id=current.role_id,
            sequence_no=seq,
            approved_by=actor.user_id,
            date=now,
            comment=action.comment,
            is_finalized=True,
        )
        return ApprovalOutcome(
            kind=OutcomeKind.COMPLETE,
            action=action,
            from_level=level,
            to_level=0,
            new_entries=(entry,),
            order_status=statuses.completed().status_id,
            workflow_id=None,
            next_level_role_id=None,
        )

    nxt = definition.at_level(level + 1)
    if nxt is None:
        raise WorkflowConfigurationError(
            definition.process_name, f"level {level + 1} is not configured",
        )
    pending_status = statuses.pending_for(nxt.level)
    entries = (
        ApprovedEntry(
            level=level,
            role_id=current.role_id,
            sequence_no=seq,
            approved_by=actor.user_id,
            date=now,
            comment=action.comment,
        ),
        PendingEntry(
            level=nxt.level,
            role_id=nxt.role_id,
            sequence_no=seq + 1,
            date=now,
        ),
    )
    return ApprovalOutcome(
        kind=OutcomeKind.ADVANCE,
        action=action,
        from_level=level,
        to_level=nxt.level,
        new_entries=entries,
        order_status=pending_status.status_id,
        workflow_id=nxt.config_id,
        next_level_role_id=nxt.role_id,
    )


def _override(
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    action: ApprovalAction,
    statuses: StatusCatalog,
    now: datetime,
    current: WorkflowLevel,
    seq: int,
) -> ApprovalOutcome:
    """Approve the current level and every later level in one action."""
    actor = action.actor
    max_level = definition.max_level
    completed_id = statuses.completed().status_id

    single = current.level == max_level
    if single:
        first_comment = action.comment or OVERRIDE_FINAL_COMMENT
    else:
        first_comment = action.comment or OVERRIDE_COMMENT.format(level=current.level)

    entries: list[LedgerEntry] = [
        ApprovedEntry(
            level=current.level,
            role_id=current.role_id,
            sequence_no=seq,
            approved_by=actor.user_id,
            date=now,
            comment=first_comment,
            is_finalized=single,
        )
    ]
    seq += 1
    for lvl in definition.levels_from(current.level + 1):
        is_final = lvl.level == max_level
        comment = action.comment or (
            OVERRIDE_FINAL_COMMENT if is_final else OVERRIDE_COMMENT.format(level=lvl.level)
        )
        entries.append(
            PendingEntry(
                level=lvl.level,
                role_id=lvl.role_id,
                sequence_no=seq,
                date=now,
                comment=comment,
            )
        )
        entries.append(
            ApprovedEntry(
                level=lvl.level,
                role_id=lvl.role_id,
                sequence_no=seq + 1,
                approved_by=actor.user_id,
                date=now,
                comment=comment,
                is_finalized=is_final,
            )
        )
        seq += 2

    return ApprovalOutcome(
        kind=OutcomeKind.COMPLETE,
        action=action,
        from_level=current.level,
        to_level=0,
        new_entries=tuple(entries),
        order_status=completed_id,
        workflow_id=None,
        next_level_role_id=None,
        is_override=True,
    )


# ---------------------------------------------------------------------------
# Reject
# ---------------------------------------------------------------------------


def _rejection_level(
    order: PurchaseOrderState, definition: WorkflowDefinition, statuses: StatusCatalog,
) -> tuple[int, WorkflowLevel | None]:
    """Level a rejection applies to.

    With no workflow pointer only a fresh order (empty ledger, not
    completed) can be rejected, at level 1.
    """
    if order.workflow_id is not None:
        current = _current_level(order, definition)
        return current.level, current
    if order.is_finalized:
        raise OrderNotAwaitingApprovalError(order.po_number, "already completed")
    if order.ledger:
        raise OrderNotAwaitingApprovalError(order.po_number, "already returned to creator")
    status = statuses.by_id(order.order_status)
    if status is not None and status.sub_category_id == statuses.completed_code:
        raise OrderNotAwaitingApprovalError(order.po_number, "already completed")
    return 1, definition.at_level(1)


def _reject(
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    action: ApprovalAction,
    statuses: StatusCatalog,
    now: datetime,
) -> ApprovalOutcome:
    _require_actor(action)
    if not action.comment.strip():
        raise MissingCommentError(order.po_number)
    actor = action.actor
    level, current = _rejection_level(order, definition, statuses)
    required_role = current.role_id if current is not None else None

    if not actor.is_super_admin and actor.role_id != required_role:
        raise PermissionDeniedError(
            str(actor.user_id), level, str(required_role) if required_role else None,
        )

    rejected_to = latest_approver(order.ledger, level - 1) if level > 1 else None
    entry = RejectedEntry(
        level=level,
        role_id=required_role,
        sequence_no=next_sequence_no(order.ledger),
        rejected_by=actor.user_id,
        rejected_to=rejected_to,
        date=now,
        comment=action.comment,
    )

    if level == 1:
        return ApprovalOutcome(
            kind=OutcomeKind.REVERT,
            action=action,
            from_level=1,
            to_level=0,
            new_entries=(entry,),
            order_status=statuses.created().status_id,
            workflow_id=None,
            next_level_role_id=None,
        )

    prev = definition.at_level(level - 1)
    if prev is None:
        raise WorkflowConfigurationError(
            definition.process_name, f"level {level - 1} is not configured",
        )
    return ApprovalOutcome(
        kind=OutcomeKind.REVERT,
        action=action,
        from_level=level,
        to_level=prev.level,
        new_entries=(entry,),
        order_status=statuses.pending_for(prev.level).status_id,
        workflow_id=prev.config_id,
        next_level_role_id=prev.role_id,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@traced_engine("approval_workflow", "1.0", fingerprint_fields=("order", "action"))
def evaluate_action(
    *,
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    action: ApprovalAction,
    statuses: StatusCatalog,
    now: datetime,
) -> ApprovalOutcome:
    """Decide the effect of ``action`` on ``order``.

    Returns an ADVANCE, COMPLETE or REVERT outcome with the entries to
    append and the pointers to write, or a REFUSED outcome carrying the
    typed error.
    """
    handler = _approve if action.kind is ActionType.APPROVE else _reject
    try:
        return handler(order, definition, action, statuses, now)
    except PurchasingError as exc:
        level = definition.level_of(order.workflow_id) or 0
        return ApprovalOutcome.refused(action, exc, from_level=level)


def apply_action(
    *,
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    action: ApprovalAction,
    statuses: StatusCatalog,
    now: datetime,
) -> ApprovalOutcome:
    """Like ``evaluate_action`` but raises the refusal error."""
    outcome = evaluate_action(
        order=order, definition=definition, action=action, statuses=statuses, now=now,
    )
    if outcome.is_refused:
        raise outcome.error
    return outcome


@traced_engine("approval_submission", "1.0", fingerprint_fields=("order",))
def evaluate_submission(
    *,
    order: PurchaseOrderState,
    definition: WorkflowDefinition,
    statuses: StatusCatalog,
    now: datetime,
) -> SubmissionOutcome:
    """Put a new or creator-returned order into the workflow at level 1.

    With no configured levels the order completes immediately and
    ``bypassed`` is set.

    Raises:
        OrderNotSubmittableError: the order is awaiting approval or
            already completed.
    """
    if order.workflow_id is not None:
        raise OrderNotSubmittableError(order.po_number, "already awaiting approval")
    if order.is_finalized:
        raise OrderNotSubmittableError(order.po_number, "already completed")
    current_status = statuses.by_id(order.order_status)
    if current_status is not None and current_status.sub_category_id != statuses.created_code:
        raise OrderNotSubmittableError(
            order.po_number, f"status is {current_status.sub_category_id}",
        )

    first = definition.at_level(1)
    if first is None:
        return SubmissionOutcome(
            new_entries=(),
            order_status=statuses.completed().status_id,
            workflow_id=None,
            next_level_role_id=None,
            bypassed=True,
        )

    entry = PendingEntry(
        level=1,
        role_id=first.role_id,
        sequence_no=next_sequence_no(order.ledger),
        date=now,
    )
    return SubmissionOutcome(
        new_entries=(entry,),
        order_status=statuses.pending_for(1).status_id,
        workflow_id=first.config_id,
        next_level_role_id=first.role_id,
    )
