"""
Load Context Use Case

Loads the signed-in user's identity context for /auth/me.
"""

from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import grants_of
from src.domain.permissions import primary_role_name
from src.libs.result import Error, Result, Return

from .dtos import RoleInfo, UserProfile


class LoadContextUseCase:
    """
    Business Rules:
    - User must exist and not be deleted
    - `role` is derived from the role assignments, never stored
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[UserProfile]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            roles = await self.uow.roles.get_roles_for_user(user.id)
            return Return.ok(
                UserProfile(
                    id=str(user.id),
                    email=user.email,
                    full_name=user.full_name,
                    role=primary_role_name([role.name for role in roles]),
                    roles=[RoleInfo(**grant) for grant in grants_of(roles)],
                )
            )
