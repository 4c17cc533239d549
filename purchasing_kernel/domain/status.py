"""
Status message catalog (``purchasing_kernel.domain.status``).

An order's ``order_status`` points at a row of the company's status
message configuration.  For purchase orders three sub-categories matter:
created, approval pending and approver completed.  Approval pending has
either one row per level (value mentions "Level N") or one template row
whose value contains the ``{@}`` placeholder for the level number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from uuid import UUID

from purchasing_kernel.exceptions import StatusMessageNotFoundError

LEVEL_PLACEHOLDER = "{@}"


@dataclass(frozen=True)
class StatusMessage:
    status_id: UUID
    category_id: str
    sub_category_id: str
    value: str

    def render(self, level: int | None = None) -> str:
        if level is None:
            return self.value
        return self.value.replace(LEVEL_PLACEHOLDER, str(level))


@dataclass(frozen=True)
class StatusCatalog:
    """Status rows for one category, with the three sub-category codes."""

    messages: tuple[StatusMessage, ...]
    created_code: str = "ORDER_CREATED"
    pending_code: str = "APPROVAL_PENDING"
    completed_code: str = "APPROVER_COMPLETED"

    def _first(self, sub_category: str) -> StatusMessage:
        for msg in self.messages:
            if msg.sub_category_id == sub_category:
                return msg
        raise StatusMessageNotFoundError(sub_category)

    def created(self) -> StatusMessage:
        return self._first(self.created_code)

    def completed(self) -> StatusMessage:
        return self._first(self.completed_code)

    def pending_for(self, level: int) -> StatusMessage:
        """Pending row naming ``Level {level}``, else the ``{@}`` template row."""
        pending = [m for m in self.messages if m.sub_category_id == self.pending_code]
        pattern = re.compile(rf"\bLevel {level}\b", re.IGNORECASE)
        for msg in pending:
            if pattern.search(msg.value):
                return msg
        for msg in pending:
            if LEVEL_PLACEHOLDER in msg.value:
                return msg
        raise StatusMessageNotFoundError(self.pending_code, level)

    def by_id(self, status_id: UUID | None) -> StatusMessage | None:
        for msg in self.messages:
            if msg.status_id == status_id:
                return msg
        return None
