"""
Sliding-window rate limiting for admin actions.
"""

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from src.app.services.counter_store import IRateWindowStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Bound of max_actions per window_minutes, counted per actor within a scope"""

    max_actions: int = 100
    window_minutes: float = 5
    scope: str = "admin"

    @property
    def window_seconds(self) -> float:
        return self.window_minutes * 60


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    retry_after: int = 0
    remaining: int = 0


class RateLimiter:
    """
    Bounds the action frequency of each actor.

    Concurrency: the read-then-append below is not atomic. Two requests from
    the same actor racing through `check` can both see `max_actions - 1` and
    both be admitted, exceeding the limit by one. This approximation is
    accepted for a fast admission check; nothing here takes a lock.
    """

    def __init__(
        self,
        store: IRateWindowStore,
        policy: RateLimitPolicy,
        clock: Callable[[], float] = time.time,
        prune_probability: float = 0.1,
        rng: Callable[[], float] = random.random,
    ):
        self.store = store
        self.policy = policy
        self.clock = clock
        self.prune_probability = prune_probability
        self.rng = rng

    def key_for(self, actor_id: str) -> str:
        return f"{self.policy.scope}:{actor_id}"

    async def check(self, actor_id: str, now: Optional[float] = None) -> RateDecision:
        now = self.clock() if now is None else now
        window = self.policy.window_seconds
        key = self.key_for(actor_id)

        recent = await self.store.recent(key, since=now - window)

        if len(recent) >= self.policy.max_actions:
            retry_after = max(1, math.ceil(recent[0] + window - now))
            logger.info(
                f"Rate limit hit for {key}: {len(recent)}/{self.policy.max_actions}, "
                f"retry after {retry_after}s"
            )
            return RateDecision(allowed=False, retry_after=retry_after, remaining=0)

        await self.store.append(key, now)

        if self.rng() < self.prune_probability:
            removed = await self.store.prune(since=now - window, prefix=f"{self.policy.scope}:")
            if removed:
                logger.debug(f"Pruned {removed} idle rate windows")

        return RateDecision(
            allowed=True, remaining=self.policy.max_actions - len(recent) - 1
        )
