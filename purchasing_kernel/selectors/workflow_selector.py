"""
WorkflowSelector -- reads approval level configuration and status messages.

Returns validated domain objects: a ``WorkflowDefinition`` (contiguous,
one row per level) and a ``StatusCatalog`` for a status category.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from purchasing_kernel.domain.status import StatusCatalog
from purchasing_kernel.domain.workflow import WorkflowDefinition
from purchasing_kernel.logging_config import get_logger
from purchasing_kernel.models.workflow import StatusMessageModel, WorkflowConfigModel
from purchasing_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.workflow")


class WorkflowSelector(BaseSelector):

    def get_definition(self, company_id: UUID, process_name: str) -> WorkflowDefinition:
        """Active levels of ``process_name`` ordered by level.

        Raises:
            WorkflowConfigurationError: levels are not contiguous from 1 or a
                level has more than one active row.
        """
        rows = self.session.scalars(
            select(WorkflowConfigModel)
            .where(
                WorkflowConfigModel.company_id == company_id,
                WorkflowConfigModel.process_name == process_name,
                WorkflowConfigModel.is_active.is_(True),
            )
            .order_by(WorkflowConfigModel.level, WorkflowConfigModel.created_at)
        ).all()
        definition = WorkflowDefinition(
            process_name=process_name,
            levels=tuple(row.to_dto() for row in rows),
        )
        logger.debug(
            "workflow_definition_loaded",
            extra={"process_name": process_name, "max_level": definition.max_level},
        )
        return definition

    def get_status_catalog(
        self,
        company_id: UUID,
        category_id: str,
        created_code: str = "ORDER_CREATED",
        pending_code: str = "APPROVAL_PENDING",
        completed_code: str = "APPROVER_COMPLETED",
    ) -> StatusCatalog:
        rows = self.session.scalars(
            select(StatusMessageModel)
            .where(
                StatusMessageModel.company_id == company_id,
                StatusMessageModel.category_id == category_id,
            )
            .order_by(StatusMessageModel.sub_category_id, StatusMessageModel.created_at)
        ).all()
        return StatusCatalog(
            messages=tuple(row.to_dto() for row in rows),
            created_code=created_code,
            pending_code=pending_code,
            completed_code=completed_code,
        )
