from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Find session by the SHA-256 hash of its token, whatever its state"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def update(self, session: Session) -> Session:
        """Update existing session"""
        pass

    @abstractmethod
    async def list_active_by_user(self, user_id: UUID, now: datetime) -> List[Session]:
        """Get all valid (non-revoked, unexpired) sessions for a user"""
        pass

    @abstractmethod
    async def count_active_by_user(self, user_id: UUID, now: datetime) -> int:
        """Count valid sessions for a user"""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke all valid sessions for a user. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def revoke_for_user(self, session_id: UUID, user_id: UUID, now: datetime) -> bool:
        """Revoke one non-revoked session of a user. Returns True if a row changed."""
        pass

    @abstractmethod
    async def active_totals(self, now: datetime) -> Dict[str, int]:
        """Valid sessions overall and the number of distinct users holding them"""
        pass
