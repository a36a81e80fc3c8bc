"""
Counter Store Interfaces

Shared mutable counters used by the rate limiter and the brute-force
detector. The in-process implementations live in
src/adapter/services/memory_counters.py; a store backed by a shared cache can
be injected instead for multi-process deployments.
"""

from abc import ABC, abstractmethod
from typing import List


class IRateWindowStore(ABC):
    """Per-key lists of action timestamps (seconds since epoch)"""

    @abstractmethod
    async def recent(self, key: str, since: float) -> List[float]:
        """
        Discard timestamps at or before `since` and return the rest, oldest first.
        """
        pass

    @abstractmethod
    async def append(self, key: str, timestamp: float) -> None:
        """Record one action"""
        pass

    @abstractmethod
    async def prune(self, since: float, prefix: str = "") -> int:
        """
        Discard stale timestamps for every key starting with `prefix` and drop
        keys left empty.

        Returns:
            Number of keys removed
        """
        pass


class IFailureCounter(ABC):
    """Per-key failure streaks that expire a fixed time after their first failure"""

    @abstractmethod
    async def increment(self, key: str, now: float, window_seconds: float) -> int:
        """Add one failure and return the streak length"""
        pass

    @abstractmethod
    async def get(self, key: str, now: float) -> int:
        """Current streak length (0 when absent or expired)"""
        pass

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Drop the streak"""
        pass
