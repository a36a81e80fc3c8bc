from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.role_repository import IRoleRepository
from src.domain.entities import Role, User, UserRole


class RoleRepository(IRoleRepository):
    """Role and assignment repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[Role]:
        stmt = select(Role).order_by(Role.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, role_id: UUID) -> Optional[Role]:
        stmt = select(Role).where(Role.id == role_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, role_ids: Sequence[UUID]) -> List[Role]:
        if not role_ids:
            return []
        stmt = select(Role).where(Role.id.in_(list(role_ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def update(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def delete(self, role: Role) -> None:
        await self.session.delete(role)
        await self.session.flush()

    async def count_users_by_role(self) -> Dict[UUID, int]:
        stmt = select(UserRole.role_id, func.count()).group_by(UserRole.role_id)
        result = await self.session.execute(stmt)
        return {role_id: count for role_id, count in result.all()}

    async def get_roles_for_user(
        self, user_id: UUID, names: Optional[Sequence[str]] = None
    ) -> List[Role]:
        """Join user_roles -> roles for one user"""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
        )
        if names is not None:
            stmt = stmt.where(Role.name.in_(list(names)))
        stmt = stmt.order_by(UserRole.assigned_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_holders(self, role_id: UUID) -> List[Tuple[User, UserRole]]:
        stmt = (
            select(User, UserRole)
            .join(UserRole, UserRole.user_id == User.id)
            .where(UserRole.role_id == role_id, User.deleted_at.is_(None))
            .order_by(UserRole.assigned_at.desc())
        )
        result = await self.session.execute(stmt)
        return [(user, assignment) for user, assignment in result.all()]

    async def get_assignment(self, user_id: UUID, role_id: UUID) -> Optional[UserRole]:
        stmt = select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_assignments(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(UserRole).where(UserRole.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def assign(self, assignment: UserRole) -> UserRole:
        self.session.add(assignment)
        await self.session.flush()
        return assignment

    async def remove_assignment(self, assignment: UserRole) -> None:
        stmt = delete(UserRole).where(
            UserRole.user_id == assignment.user_id,
            UserRole.role_id == assignment.role_id,
        )
        await self.session.execute(stmt)
        await self.session.flush()
