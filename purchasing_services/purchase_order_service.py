"""
purchasing_services.purchase_order_service -- Create and resubmit purchase orders.

Responsibility:
    Insert a new purchase order already submitted into its approval
    workflow, or put a creator-returned order (rejected at Level 1) back
    into it.  Records the matching system log line.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

Failure modes:
    - OrderNotSubmittableError -- the order is awaiting approval or done.
    - PurchaseOrderNotFoundError / ConflictError on resubmit.
    - WorkflowConfigurationError / StatusMessageNotFoundError when the
      company's configuration is incomplete.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from purchasing_config.schema import PurchasingSettings
from purchasing_engines.approval import evaluate_submission
from purchasing_kernel.domain.approval import PurchaseOrderState, SubmissionOutcome
from purchasing_kernel.domain.clock import Clock
from purchasing_kernel.domain.ledger import ledger_to_json
from purchasing_kernel.exceptions import ConflictError, PurchaseOrderNotFoundError
from purchasing_kernel.logging_config import LogContext, get_logger
from purchasing_kernel.models.purchase_order import PurchaseOrderModel
from purchasing_kernel.selectors.workflow_selector import WorkflowSelector
from purchasing_kernel.services.base import BaseService
from purchasing_kernel.services.system_log_service import (
    SCOPE_ADD,
    SCOPE_EDIT,
    SystemLogService,
)

logger = get_logger("services.purchase_order")


class PurchaseOrderService(BaseService):

    def __init__(
        self,
        session: Session,
        settings: PurchasingSettings,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.settings = settings
        self.workflows = WorkflowSelector(session)
        self.system_log = SystemLogService(session, self.clock)

    def create_order(
        self,
        *,
        company_id: UUID,
        po_number: str,
        created_by: UUID,
        supplier_name: str = "",
        store_id: UUID | None = None,
        total_items: int = 0,
        total_value: Decimal = Decimal("0"),
        remarks: str | None = None,
    ) -> PurchaseOrderState:
        """Insert an order and submit it at level 1 of the workflow."""
        now = self.clock.now()
        model = PurchaseOrderModel(
            id=uuid4(),
            company_id=company_id,
            po_number=po_number,
            supplier_name=supplier_name,
            store_id=store_id,
            total_items=total_items,
            total_value=total_value,
            approval_status=[],
            remarks=remarks,
            created_by=created_by,
            created_at=now,
        )
        with LogContext.bind(actor_id=created_by, entity_id=model.id):
            self._submit(model, model.to_dto())
            self.session.add(model)
            self.session.flush()
            self.system_log.record(
                company_id=company_id,
                module=self.settings.workflow.order_audit_module,
                scope=SCOPE_ADD,
                key=po_number,
                message=f"Purchase Order {po_number} created.",
                action_by=created_by,
            )
            logger.info(
                "purchase_order_created",
                extra={"po_number": po_number, "total_value": str(total_value)},
            )
            return model.to_dto()

    def resubmit(
        self,
        order_id: UUID,
        actor_id: UUID,
        expected_version: int | None = None,
    ) -> PurchaseOrderState:
        """Send an order returned to its creator back to level 1."""
        model = self.session.get(PurchaseOrderModel, order_id)
        if model is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        if expected_version is not None and model.version != expected_version:
            raise ConflictError(
                "PurchaseOrder", str(order_id), expected_version, model.version,
            )

        with LogContext.bind(actor_id=actor_id, entity_id=order_id):
            self._submit(model, model.to_dto())
            model.modified_by = actor_id
            model.modified_at = self.clock.now()
            self.session.flush()
            self.system_log.record(
                company_id=model.company_id,
                module=self.settings.workflow.order_audit_module,
                scope=SCOPE_EDIT,
                key=model.po_number,
                message=f"Purchase Order {model.po_number} updated.",
                action_by=actor_id,
            )
            logger.info("purchase_order_resubmitted", extra={"po_number": model.po_number})
            return model.to_dto()

    def _submit(
        self, model: PurchaseOrderModel, order: PurchaseOrderState,
    ) -> SubmissionOutcome:
        wf = self.settings.workflow
        definition = self.workflows.get_definition(order.company_id, wf.process_name)
        statuses = self.workflows.get_status_catalog(
            order.company_id,
            wf.status_category,
            created_code=wf.created_sub_category,
            pending_code=wf.pending_sub_category,
            completed_code=wf.completed_sub_category,
        )
        outcome = evaluate_submission(
            order=order, definition=definition, statuses=statuses, now=self.clock.now(),
        )
        if outcome.bypassed:
            logger.warning(
                "approval_bypassed_no_levels",
                extra={"po_number": order.po_number, "process_name": wf.process_name},
            )

        model.approval_status = ledger_to_json(order.ledger + outcome.new_entries)
        model.order_status = outcome.order_status
        model.workflow_id = outcome.workflow_id
        model.next_level_role_id = outcome.next_level_role_id
        return outcome
