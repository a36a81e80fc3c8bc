from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (including soft-deleted users)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID (including soft-deleted users)"""
        pass

    @abstractmethod
    async def get_active_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID, ignoring soft-deleted users"""
        pass

    @abstractmethod
    async def lock_for_update(self, user_id: UUID) -> Optional[User]:
        """Get user by ID, holding a row lock until the transaction ends"""
        pass

    @abstractmethod
    async def list_paginated(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        """
        List non-deleted users.

        Returns:
            Tuple of (users page, total matching users)
        """
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def status_counts(self, now: datetime) -> Dict[str, int]:
        """Totals for the dashboard: all, new in 7 and 30 days, locked, deleted"""
        pass
