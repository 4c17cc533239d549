"""
DirectorySelector -- role membership and user names for the approval fan-out.

Only active users of the acting company are ever returned.  Results are
ordered by creation time so notification order is stable.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select

from purchasing_kernel.domain.approval import Actor
from purchasing_kernel.models.directory import RoleModel, UserModel
from purchasing_kernel.selectors.base import BaseSelector

UNKNOWN_USER = "Unknown User"


class DirectorySelector(BaseSelector):

    def users_in_role(self, company_id: UUID, role_id: UUID | None) -> tuple[UUID, ...]:
        if role_id is None:
            return ()
        return tuple(
            self.session.scalars(
                select(UserModel.id)
                .where(
                    UserModel.company_id == company_id,
                    UserModel.role_id == role_id,
                    UserModel.is_active.is_(True),
                )
                .order_by(UserModel.created_at, UserModel.id)
            ).all()
        )

    def role_members(
        self, company_id: UUID, role_ids: Iterable[UUID | None],
    ) -> dict[UUID, tuple[UUID, ...]]:
        members: dict[UUID, tuple[UUID, ...]] = {}
        for role_id in role_ids:
            if role_id is not None and role_id not in members:
                members[role_id] = self.users_in_role(company_id, role_id)
        return members

    def role_id_by_name(self, company_id: UUID, role_name: str) -> UUID | None:
        return self.session.scalars(
            select(RoleModel.id)
            .where(
                RoleModel.company_id == company_id,
                RoleModel.role_name == role_name,
                RoleModel.is_active.is_(True),
            )
            .order_by(RoleModel.created_at)
            .limit(1)
        ).first()

    def super_admin_users(self, company_id: UUID, role_name: str) -> tuple[UUID, ...]:
        role_id = self.role_id_by_name(company_id, role_name)
        return self.users_in_role(company_id, role_id)

    def display_name(self, user_id: UUID | None) -> str:
        if user_id is None:
            return UNKNOWN_USER
        user = self.session.get(UserModel, user_id)
        if user is None or not user.display_name:
            return UNKNOWN_USER
        return user.display_name

    def actor_for(
        self, company_id: UUID, user_id: UUID, super_admin_role_name: str,
    ) -> Actor:
        """Workflow actor for a user; super admin when their role has that name.

        Unknown or inactive users yield an actor with no role, which the
        approval engine refuses.
        """
        user = self.session.get(UserModel, user_id)
        if user is None or not user.is_active or user.company_id != company_id:
            return Actor(user_id=user_id, role_id=None, display_name=UNKNOWN_USER)
        admin_role = self.role_id_by_name(company_id, super_admin_role_name)
        return Actor(
            user_id=user.id,
            role_id=user.role_id,
            is_super_admin=admin_role is not None and user.role_id == admin_role,
            display_name=user.display_name or UNKNOWN_USER,
        )
