"""
SystemLogService -- appends rows to the human-readable audit trail.

Each workflow action, purchase order submission and invoice save records
one line: module, scope (Add/Edit), business key and message.  Rows are
append-only (see ``models.audit``).
"""

from __future__ import annotations

from uuid import UUID

from purchasing_kernel.logging_config import get_logger
from purchasing_kernel.models.audit import SystemLogModel
from purchasing_kernel.services.base import BaseService

logger = get_logger("services.system_log")

SCOPE_ADD = "Add"
SCOPE_EDIT = "Edit"


class SystemLogService(BaseService):

    def record(
        self,
        *,
        company_id: UUID,
        module: str,
        scope: str,
        key: str,
        message: str,
        action_by: UUID | None,
    ) -> SystemLogModel:
        now = self.clock.now()
        row = SystemLogModel(
            company_id=company_id,
            transaction_date=now,
            module=module,
            scope=scope,
            key=key,
            log=message,
            action_by=action_by,
            created_at=now,
        )
        self.session.add(row)
        self.session.flush()
        logger.info(
            "system_log_recorded",
            extra={"log_module": module, "scope": scope, "key": key},
        )
        return row
