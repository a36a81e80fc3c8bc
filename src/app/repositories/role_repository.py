from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from src.domain.entities import Role, User, UserRole


class IRoleRepository(ABC):
    """Role and role-assignment repository interface - application layer"""

    @abstractmethod
    async def list_all(self) -> List[Role]:
        """Get every role"""
        pass

    @abstractmethod
    async def get_by_id(self, role_id: UUID) -> Optional[Role]:
        """Get role by ID"""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Role]:
        """Get role by unique name"""
        pass

    @abstractmethod
    async def get_by_ids(self, role_ids: Sequence[UUID]) -> List[Role]:
        """Get every role whose ID is in role_ids"""
        pass

    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Create a new role"""
        pass

    @abstractmethod
    async def update(self, role: Role) -> Role:
        """Update existing role"""
        pass

    @abstractmethod
    async def delete(self, role: Role) -> None:
        """Delete a role"""
        pass

    @abstractmethod
    async def count_users_by_role(self) -> Dict[UUID, int]:
        """Number of assignments per role ID"""
        pass

    @abstractmethod
    async def get_roles_for_user(
        self, user_id: UUID, names: Optional[Sequence[str]] = None
    ) -> List[Role]:
        """Roles assigned to a user, optionally restricted to the given role names"""
        pass

    @abstractmethod
    async def list_holders(self, role_id: UUID) -> List[Tuple[User, UserRole]]:
        """Non-deleted users holding a role, newest assignment first"""
        pass

    @abstractmethod
    async def get_assignment(self, user_id: UUID, role_id: UUID) -> Optional[UserRole]:
        """Get a single assignment"""
        pass

    @abstractmethod
    async def count_assignments(self, user_id: UUID) -> int:
        """Number of roles assigned to a user"""
        pass

    @abstractmethod
    async def assign(self, assignment: UserRole) -> UserRole:
        """Create an assignment"""
        pass

    @abstractmethod
    async def remove_assignment(self, assignment: UserRole) -> None:
        """Delete an assignment"""
        pass
