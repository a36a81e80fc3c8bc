"""
Role Assignment Use Case

Grants and removes roles on a user account. A user keeps at least one role.
"""

from typing import Any, Dict
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import UserRole
from src.libs.result import Error, Result, Return


class RoleAssignmentUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def assign(self, user_id: UUID, role_id: UUID, admin_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))

            if await self.uow.roles.get_assignment(user_id, role_id) is not None:
                return Return.err(
                    Error("ROLE_ALREADY_ASSIGNED", "User already has this role")
                )

            await self.uow.roles.assign(
                UserRole(user_id=user_id, role_id=role_id, assigned_by=admin_id)
            )
            await self.uow.commit()
            return Return.ok(
                {"user_id": str(user_id), "role_id": str(role_id), "role_name": role.name}
            )

    async def remove(self, user_id: UUID, role_id: UUID) -> Result[Dict[str, Any]]:
        """Removing the last remaining assignment is rejected with LAST_ROLE."""
        async with self.uow:
            # Row lock serializes concurrent removals for this user
            await self.uow.users.lock_for_update(user_id)

            assignment = await self.uow.roles.get_assignment(user_id, role_id)
            if assignment is None:
                return Return.err(Error("ROLE_NOT_ASSIGNED", "User does not have this role"))

            if await self.uow.roles.count_assignments(user_id) <= 1:
                return Return.err(
                    Error("LAST_ROLE", "Cannot remove the last role of a user")
                )

            await self.uow.roles.remove_assignment(assignment)
            await self.uow.commit()
            return Return.ok({"user_id": str(user_id), "role_id": str(role_id)})
