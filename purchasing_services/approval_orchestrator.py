"""
purchasing_services.approval_orchestrator -- Approve/reject a purchase order end to end.

Responsibility:
    Load the order, its process definition and the status catalog; ask the
    approval engine for the outcome; write the ledger and order pointers;
    record the system log line; compute and deliver notifications; build
    the user-facing result message.

Architecture position:
    Services -- stateful orchestration over engines + kernel.  The engines
    decide, this module reads and writes.

Invariants enforced:
    - Atomicity: the order update and system log row are flushed into the
      caller's transaction.  A refusal raises before anything is written.
    - Optimistic concurrency: a caller-supplied ``expected_version`` that
      no longer matches raises ConflictError; a concurrent writer that
      wins the UPDATE race surfaces as ConflictError too.
    - Notifications are best-effort: a failed insert is reported on the
      result and never undoes the approval.

Failure modes:
    - PurchaseOrderNotFoundError -- unknown order id.
    - Any ``WorkflowError`` from the engine (permission, missing comment,
      not awaiting approval, configuration).
    - ConflictError -- version mismatch or lost UPDATE race.  The caller
      must roll back the session.
    - NetworkError -- any other database failure, including directory reads
      for the notification fan-out.

Usage:
    with session_scope() as session:
        orchestrator = ApprovalOrchestrator(session, get_active_config())
        actor = orchestrator.resolve_actor(company_id, user_id)
        result = orchestrator.approve(order_id, actor, comment="OK")
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from purchasing_config.schema import PurchasingSettings
from purchasing_engines.approval import evaluate_action
from purchasing_engines.notifications import compute_notifications
from purchasing_kernel.domain.approval import (
    ActionType,
    Actor,
    ApprovalAction,
    ApprovalOutcome,
    OutcomeKind,
    PurchaseOrderState,
)
from purchasing_kernel.domain.clock import Clock, SystemClock
from purchasing_kernel.domain.ledger import ledger_to_json
from purchasing_kernel.domain.notification import NotificationPayload
from purchasing_kernel.domain.workflow import WorkflowDefinition
from purchasing_kernel.exceptions import (
    ConflictError,
    NetworkError,
    PurchaseOrderNotFoundError,
)
from purchasing_kernel.logging_config import LogContext, get_logger
from purchasing_kernel.models.purchase_order import PurchaseOrderModel
from purchasing_kernel.selectors.directory_selector import DirectorySelector
from purchasing_kernel.selectors.workflow_selector import WorkflowSelector
from purchasing_kernel.services.notification_service import (
    DeliveryReport,
    NotificationService,
)
from purchasing_kernel.services.system_log_service import SCOPE_EDIT, SystemLogService

logger = get_logger("services.approval")

DELIVERY_FAILED_NOTE = " (notifications could not be delivered)"


@dataclass(frozen=True)
class ApprovalResult:
    """What happened, the order afterwards and how delivery went."""

    outcome: ApprovalOutcome
    order: PurchaseOrderState
    notifications: tuple[NotificationPayload, ...]
    delivery: DeliveryReport
    message: str


def _system_log_message(
    po_number: str, outcome: ApprovalOutcome, actor_name: str,
) -> str:
    if outcome.action.kind is ActionType.REJECT:
        return f"Purchase Order {po_number} level {outcome.from_level} rejected by {actor_name}."
    if outcome.is_override:
        return (
            f"Purchase Order {po_number} approved by Super Admin override "
            f"(User: {actor_name})."
        )
    return f"Purchase Order {po_number} level {outcome.from_level} approved by {actor_name}."


def _result_message(po_number: str, outcome: ApprovalOutcome) -> str:
    if outcome.action.kind is ActionType.REJECT:
        return f"Purchase Order {po_number} has been rejected"
    if outcome.is_override:
        return (
            f"Purchase Order {po_number} has been approved through all levels "
            f"by Super Admin override"
        )
    if outcome.kind is OutcomeKind.COMPLETE:
        return f"Purchase Order {po_number} has been fully approved and completed"
    return f"Purchase Order {po_number} has been approved and forwarded to the next level"


class ApprovalOrchestrator:
    """
    Runs one approval action against one purchase order.

    Contract:
        Receives the caller's Session, the active settings and an optional
        Clock.  Flushes but never commits.
    Non-goals:
        - Does not submit orders into the workflow (PurchaseOrderService).
        - Does not retry failed notification batches.
    """

    def __init__(
        self,
        session: Session,
        settings: PurchasingSettings,
        clock: Clock | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.clock = clock or SystemClock()
        self.workflows = WorkflowSelector(session)
        self.directory = DirectorySelector(session)
        self.system_log = SystemLogService(session, self.clock)
        self.notifications = NotificationService(session, self.clock)

    # =========================================================================
    # Public API
    # =========================================================================

    def resolve_actor(self, company_id: UUID, user_id: UUID) -> Actor:
        """Actor for ``user_id`` with their role and super admin flag."""
        return self.directory.actor_for(
            company_id, user_id, self.settings.workflow.super_admin_role_name,
        )

    def approve(
        self,
        order_id: UUID,
        actor: Actor,
        comment: str = "",
        expected_version: int | None = None,
    ) -> ApprovalResult:
        return self._run(order_id, ApprovalAction.approve(actor, comment), expected_version)

    def reject(
        self,
        order_id: UUID,
        actor: Actor,
        comment: str,
        expected_version: int | None = None,
    ) -> ApprovalResult:
        return self._run(order_id, ApprovalAction.reject(actor, comment), expected_version)

    # =========================================================================
    # Internals
    # =========================================================================

    def _run(
        self,
        order_id: UUID,
        action: ApprovalAction,
        expected_version: int | None,
    ) -> ApprovalResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=action.actor.user_id,
            entity_id=order_id,
        ):
            t0 = time.monotonic()
            try:
                result = self._execute(order_id, action, expected_version)
            except StaleDataError as exc:
                logger.warning(
                    "approval_conflict",
                    extra={"order_id": str(order_id), "action": action.kind.value},
                )
                raise ConflictError("PurchaseOrder", str(order_id), expected_version) from exc
            except SQLAlchemyError as exc:
                logger.error(
                    "approval_backend_failed",
                    extra={"order_id": str(order_id), "action": action.kind.value},
                    exc_info=True,
                )
                raise NetworkError(f"{action.kind.value.lower()} purchase order", str(exc)) from exc

            logger.info(
                "approval_recorded",
                extra={
                    "po_number": result.order.po_number,
                    "action": action.kind.value,
                    "outcome": result.outcome.kind.value,
                    "from_level": result.outcome.from_level,
                    "to_level": result.outcome.to_level,
                    "is_override": result.outcome.is_override,
                    "notification_count": len(result.notifications),
                    "notifications_delivered": result.delivery.ok,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    def _execute(
        self,
        order_id: UUID,
        action: ApprovalAction,
        expected_version: int | None,
    ) -> ApprovalResult:
        model = self.session.get(PurchaseOrderModel, order_id)
        if model is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        if expected_version is not None and model.version != expected_version:
            raise ConflictError(
                "PurchaseOrder", str(order_id), expected_version, model.version,
            )

        order = model.to_dto()
        wf = self.settings.workflow
        definition = self.workflows.get_definition(order.company_id, wf.process_name)
        statuses = self.workflows.get_status_catalog(
            order.company_id,
            wf.status_category,
            created_code=wf.created_sub_category,
            pending_code=wf.pending_sub_category,
            completed_code=wf.completed_sub_category,
        )
        now = self.clock.now()

        outcome = evaluate_action(
            order=order,
            definition=definition,
            action=action,
            statuses=statuses,
            now=now,
        )
        if outcome.is_refused:
            logger.warning(
                "approval_action_refused",
                extra={
                    "po_number": order.po_number,
                    "action": action.kind.value,
                    "error_code": outcome.error.code,
                    "reason": str(outcome.error),
                },
            )
            raise outcome.error

        model.approval_status = ledger_to_json(outcome.ledger_after(order))
        model.order_status = outcome.order_status
        model.workflow_id = outcome.workflow_id
        model.next_level_role_id = outcome.next_level_role_id
        model.modified_by = action.actor.user_id
        model.modified_at = now
        self.session.flush()

        actor_name = action.actor.display_name or self.directory.display_name(
            action.actor.user_id,
        )
        self.system_log.record(
            company_id=order.company_id,
            module=wf.approval_audit_module,
            scope=SCOPE_EDIT,
            key=order.po_number,
            message=_system_log_message(order.po_number, outcome, actor_name),
            action_by=action.actor.user_id,
        )

        payloads = self._compute_notifications(order, outcome, definition, actor_name)
        delivery = self.notifications.deliver(payloads, order.company_id)

        message = _result_message(order.po_number, outcome)
        if not delivery.ok:
            message += DELIVERY_FAILED_NOTE

        return ApprovalResult(
            outcome=outcome,
            order=model.to_dto(),
            notifications=payloads,
            delivery=delivery,
            message=message,
        )

    def _compute_notifications(
        self,
        order: PurchaseOrderState,
        outcome: ApprovalOutcome,
        definition: WorkflowDefinition,
        actor_name: str,
    ) -> tuple[NotificationPayload, ...]:
        super_admins = self.directory.super_admin_users(
            order.company_id, self.settings.workflow.super_admin_role_name,
        )
        role_members = self.directory.role_members(
            order.company_id, definition.role_ids,
        )
        return compute_notifications(
            order=order,
            outcome=outcome,
            definition=definition,
            actor_name=actor_name,
            super_admin_users=super_admins,
            role_members=role_members,
            currency_symbol=self.settings.notifications.currency_symbol,
        )
