from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import BlockedIP


class IBlockedIPRepository(ABC):
    """BlockedIP repository interface - application layer"""

    @abstractmethod
    async def get_active_by_ip(self, ip_address: str, now: datetime) -> Optional[BlockedIP]:
        """Get the active block for an address, if any"""
        pass

    @abstractmethod
    async def get_by_id(self, blocked_id: UUID) -> Optional[BlockedIP]:
        """Get block entry by ID"""
        pass

    @abstractmethod
    async def list_paginated(
        self, state: str, now: datetime, limit: int = 20, offset: int = 0
    ) -> Tuple[List[BlockedIP], int]:
        """
        List block entries; state is "active", "expired" or "all".

        Returns:
            Tuple of (entries page, total matching entries)
        """
        pass

    @abstractmethod
    async def create(self, blocked: BlockedIP) -> BlockedIP:
        """Create a block entry"""
        pass

    @abstractmethod
    async def update(self, blocked: BlockedIP) -> BlockedIP:
        """Update a block entry"""
        pass

    @abstractmethod
    async def delete(self, blocked: BlockedIP) -> None:
        """Remove a block entry"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Remove every entry whose expiry has passed. Returns count."""
        pass

    @abstractmethod
    async def count_active(self, now: datetime) -> int:
        """Entries that are indefinite or not yet expired"""
        pass
