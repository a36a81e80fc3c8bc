"""
Role Management Use Case

CRUD over roles plus the permission catalogue.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import iso, role_dict
from src.domain.base import utcnow
from src.domain.entities import Role
from src.domain.permissions import PERMISSION_CATALOG, normalize_permissions, unknown_permissions
from src.libs.result import Error, Result, Return


def _unknown_permissions_error(unknown: List[str]) -> Error:
    return Error("UNKNOWN_PERMISSION", f"Unknown permissions: {', '.join(unknown)}")


class RoleManagementUseCase:
    """
    Business Rules:
    - Role names are unique
    - Permissions must come from the catalogue, duplicates are dropped
    - System roles cannot be edited or deleted
    - A role still assigned to users cannot be deleted
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_roles(self) -> Result[Dict[str, Any]]:
        """System roles first, then by name"""
        async with self.uow:
            roles = await self.uow.roles.list_all()
            counts = await self.uow.roles.count_users_by_role()
            ordered = sorted(roles, key=lambda r: (not r.is_system, r.name))
            return Return.ok(
                {"roles": [role_dict(role, counts.get(role.id, 0)) for role in ordered]}
            )

    async def get_role(self, role_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))

            holders = await self.uow.roles.list_holders(role.id)
            data = role_dict(role, len(holders))
            data["users"] = [
                {
                    "id": str(user.id),
                    "email": user.email,
                    "full_name": user.full_name,
                    "assigned_at": iso(assignment.assigned_at),
                    "assigned_by": str(assignment.assigned_by) if assignment.assigned_by else None,
                }
                for user, assignment in holders
            ]
            return Return.ok({"role": data})

    async def create_role(
        self, name: str, description: Optional[str] = None, permissions: Optional[List[str]] = None
    ) -> Result[Dict[str, Any]]:
        permissions = normalize_permissions(permissions or [])
        unknown = unknown_permissions(permissions)
        if unknown:
            return Return.err(_unknown_permissions_error(unknown))

        async with self.uow:
            if await self.uow.roles.get_by_name(name) is not None:
                return Return.err(Error("ROLE_NAME_TAKEN", "Role name already exists"))

            role = Role(name=name, description=description, permissions=permissions)
            await self.uow.roles.create(role)
            await self.uow.commit()
            return Return.ok({"role": role_dict(role, 0)})

    async def update_role(
        self,
        role_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Optional[List[str]] = None,
    ) -> Result[Dict[str, Any]]:
        if permissions is not None:
            permissions = normalize_permissions(permissions)
            unknown = unknown_permissions(permissions)
            if unknown:
                return Return.err(_unknown_permissions_error(unknown))

        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))
            if role.is_system:
                return Return.err(
                    Error("SYSTEM_ROLE_IMMUTABLE", "System roles cannot be modified")
                )

            if name is not None and name != role.name:
                if await self.uow.roles.get_by_name(name) is not None:
                    return Return.err(Error("ROLE_NAME_TAKEN", "Role name already exists"))
                role.name = name
            if description is not None:
                role.description = description
            if permissions is not None:
                role.permissions = permissions

            role.updated_at = utcnow()
            await self.uow.roles.update(role)
            await self.uow.commit()
            return Return.ok({"role": role_dict(role)})

    async def delete_role(self, role_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))
            if role.is_system:
                return Return.err(
                    Error("SYSTEM_ROLE_IMMUTABLE", "System roles cannot be deleted")
                )

            counts = await self.uow.roles.count_users_by_role()
            if counts.get(role.id, 0) > 0:
                return Return.err(
                    Error("ROLE_IN_USE", "Role is still assigned to users")
                )

            name = role.name
            await self.uow.roles.delete(role)
            await self.uow.commit()
            return Return.ok({"role_id": str(role_id), "name": name})

    async def list_permissions(self) -> Result[Dict[str, Any]]:
        return Return.ok(
            {
                "permissions": [
                    {"category": category, "permissions": list(permissions)}
                    for category, permissions in PERMISSION_CATALOG.items()
                ]
            }
        )
