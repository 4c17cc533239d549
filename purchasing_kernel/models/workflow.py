"""
Module: purchasing_kernel.models.workflow
Responsibility: ORM persistence for approval level configuration and the
    status message rows that orders point at.

Architecture position: Kernel > Models.  May import from db/base.py only
    (domain DTOs are imported lazily inside ``to_dto``).

Invariants enforced:
    - One active row per (company, process, level): partial unique index.
    - level >= 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString

if TYPE_CHECKING:
    from purchasing_kernel.domain.status import StatusMessage
    from purchasing_kernel.domain.workflow import WorkflowLevel


class WorkflowConfigModel(CompanyScopedBase):
    """One approval level of one process."""

    __tablename__ = "workflow_config"

    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_workflow_config_level_positive"),
        Index(
            "ix_workflow_config_active_level",
            "company_id", "process_name", "level",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    process_name: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    role_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    override_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<WorkflowConfig {self.process_name} L{self.level} role={self.role_id}>"

    def to_dto(self) -> WorkflowLevel:
        from purchasing_kernel.domain.workflow import WorkflowLevel

        return WorkflowLevel(
            config_id=self.id,
            process_name=self.process_name,
            level=self.level,
            role_id=self.role_id,
            override_enabled=self.override_enabled,
        )


class StatusMessageModel(CompanyScopedBase):
    """A configurable status label (category / sub-category / display value)."""

    __tablename__ = "system_message_config"

    __table_args__ = (
        Index(
            "ix_system_message_config_lookup",
            "company_id", "category_id", "sub_category_id",
        ),
    )

    category_id: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category_id: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<StatusMessage {self.category_id}/{self.sub_category_id} {self.value!r}>"

    def to_dto(self) -> StatusMessage:
        from purchasing_kernel.domain.status import StatusMessage

        return StatusMessage(
            status_id=self.id,
            category_id=self.category_id,
            sub_category_id=self.sub_category_id,
            value=self.value,
        )
