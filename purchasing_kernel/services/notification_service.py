"""
NotificationService -- best-effort delivery of computed notification payloads.

Responsibility:
    Batch-insert one ``system_notification`` row per payload with status
    New, the clock's timestamp and the acting company.

Failure semantics:
    Delivery runs inside a SAVEPOINT.  If the insert fails only the
    savepoint is rolled back: the caller's order and ledger writes in the
    enclosing transaction are untouched.  The failure is logged and
    reported in the returned ``DeliveryReport``; it is not raised.
    Delivery is at-most-once: nothing retries a failed batch.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from purchasing_kernel.domain.notification import NotificationPayload
from purchasing_kernel.exceptions import NotificationDeliveryError
from purchasing_kernel.logging_config import get_logger
from purchasing_kernel.models.notification import NotificationModel
from purchasing_kernel.services.base import BaseService

logger = get_logger("services.notification")


@dataclass(frozen=True)
class DeliveryReport:
    delivered: int = 0
    failed: int = 0
    error: NotificationDeliveryError | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class NotificationService(BaseService):

    def deliver(
        self,
        payloads: Sequence[NotificationPayload],
        company_id: UUID,
    ) -> DeliveryReport:
        if not payloads:
            return DeliveryReport()

        now = self.clock.now()
        rows = [
            NotificationModel(
                company_id=company_id,
                assign_to=p.assign_to,
                message=p.message,
                status=p.status.value,
                priority=p.priority.value,
                alert_type=p.alert_type.value,
                entity_id=p.entity_id,
                acknowledged_at=None,
                created_at=now,
            )
            for p in payloads
        ]
        entity_id = payloads[0].entity_id

        try:
            with self.session.begin_nested():
                self.session.add_all(rows)
        except SQLAlchemyError as exc:
            error = NotificationDeliveryError(entity_id, len(rows))
            error.__cause__ = exc
            logger.error(
                "notification_delivery_failed",
                extra={"entity_id": entity_id, "count": len(rows)},
                exc_info=True,
            )
            return DeliveryReport(delivered=0, failed=len(rows), error=error)

        logger.info(
            "notifications_delivered",
            extra={"entity_id": entity_id, "count": len(rows)},
        )
        return DeliveryReport(delivered=len(rows))
