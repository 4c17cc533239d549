"""
Module: purchasing_kernel.models.directory
Responsibility: ORM persistence for roles and users, read by the workflow
    to resolve approvers, super admins and display names.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from purchasing_kernel.db.base import CompanyScopedBase, UUIDString


class RoleModel(CompanyScopedBase):
    __tablename__ = "role_master"

    __table_args__ = (
        Index("ix_role_master_company_name", "company_id", "role_name"),
    )

    role_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Role {self.role_name}>"


class UserModel(CompanyScopedBase):
    __tablename__ = "user_mgmt"

    __table_args__ = (
        Index("ix_user_mgmt_company_role", "company_id", "role_id", "is_active"),
    )

    first_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User {self.display_name} role={self.role_id}>"
