"""
List / Get User Use Cases

Read side of the admin user console.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import pagination, user_dict
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return


class ListUsersUseCase:
    """
    Business Rules:
    - Soft-deleted users are never listed
    - search matches email or full name, case-insensitive
    - status filters on the lock state: "active" or "locked"
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Result[Dict[str, Any]]:
        async with self.uow:
            users, total = await self.uow.users.list_paginated(
                search=search,
                status=status,
                sort_by=sort_by,
                sort_order=sort_order,
                limit=limit,
                offset=(page - 1) * limit,
            )

            items = []
            for user in users:
                roles = await self.uow.roles.get_roles_for_user(user.id)
                items.append(user_dict(user, roles))

            return Return.ok({"users": items, "pagination": pagination(page, limit, total)})


class GetUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            roles = await self.uow.roles.get_roles_for_user(user.id)
            active_sessions = await self.uow.sessions.count_active_by_user(user.id, utcnow())

            data = user_dict(user, roles)
            data["active_sessions"] = active_sessions
            return Return.ok({"user": data})
