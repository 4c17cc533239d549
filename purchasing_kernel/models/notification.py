"""
Module: purchasing_kernel.models.notification
Responsibility: ORM persistence for in-app notifications produced by the
    approval fan-out.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString


class NotificationModel(CompanyScopedBase):
    __tablename__ = "system_notification"

    __table_args__ = (
        CheckConstraint(
            "status IN ('New', 'Read', 'Deleted')",
            name="ck_system_notification_status",
        ),
        CheckConstraint(
            "priority IN ('Low', 'Medium', 'High')",
            name="ck_system_notification_priority",
        ),
        Index("ix_system_notification_assignee", "company_id", "assign_to", "status"),
        Index("ix_system_notification_entity", "company_id", "entity_id"),
    )

    assign_to: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="New", nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(100), nullable=False)
    acknowledged_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Notification {self.alert_type} to={self.assign_to} {self.status}>"
