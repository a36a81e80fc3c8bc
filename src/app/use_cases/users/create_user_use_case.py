"""
Create User Use Case

Creates an account together with its initial role assignments.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

import bcrypt

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import user_dict
from src.domain.entities import SystemRoleName, User, UserRole
from src.libs.result import Error, Result, Return


class CreateUserUseCase:
    """
    Business Rules:
    - Email is unique (case-insensitive, stored lowercase)
    - Every requested role must exist
    - Without role_ids the built-in `user` role is assigned, so a user never
      exists without at least one role
    - User row and role assignments are committed together or not at all
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        email: str,
        password: str,
        admin_id: UUID,
        full_name: Optional[str] = None,
        role_ids: Optional[List[UUID]] = None,
    ) -> Result[Dict[str, Any]]:
        email = email.strip().lower()

        async with self.uow:
            if await self.uow.users.get_by_email(email) is not None:
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already exists"))

            if role_ids:
                unique_ids = list(dict.fromkeys(role_ids))
                roles = await self.uow.roles.get_by_ids(unique_ids)
                if len(roles) != len(unique_ids):
                    return Return.err(Error("ROLE_NOT_FOUND", "One or more roles do not exist"))
            else:
                default_role = await self.uow.roles.get_by_name(SystemRoleName.user.value)
                if default_role is None:
                    return Return.err(
                        Error("ROLE_NOT_FOUND", "Default role 'user' is not configured")
                    )
                roles = [default_role]

            user = User(
                email=email,
                full_name=full_name,
                password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(12)).decode(),
            )
            await self.uow.users.create(user)

            for role in roles:
                await self.uow.roles.assign(
                    UserRole(user_id=user.id, role_id=role.id, assigned_by=admin_id)
                )

            await self.uow.commit()
            return Return.ok({"user": user_dict(user, roles)})
