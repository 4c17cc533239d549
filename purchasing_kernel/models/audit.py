"""
Module: purchasing_kernel.models.audit
Responsibility: ORM persistence for the system log, the human-readable
    audit trail of who did what to which record.

Invariants enforced:
    - Append-only: ORM listeners refuse UPDATE and DELETE of a log row.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString
from purchasing_kernel.exceptions import ImmutableRecordError


class SystemLogModel(CompanyScopedBase):
    __tablename__ = "system_log"

    __table_args__ = (
        Index("ix_system_log_company_module_key", "company_id", "module", "key"),
    )

    transaction_date: Mapped[datetime] = mapped_column(nullable=False)
    module: Mapped[str] = mapped_column(String(100), nullable=False)
    scope: Mapped[str] = mapped_column(String(50), nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    log: Mapped[str] = mapped_column(Text, nullable=False)
    action_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<SystemLog {self.module}/{self.scope} {self.key}>"


@event.listens_for(SystemLogModel, "before_update")
def prevent_system_log_update(mapper, connection, target):
    """System log rows are append-only."""
    raise ImmutableRecordError("SystemLog", str(target.id), "update")


@event.listens_for(SystemLogModel, "before_delete")
def prevent_system_log_delete(mapper, connection, target):
    """System log rows are append-only."""
    raise ImmutableRecordError("SystemLog", str(target.id), "delete")
