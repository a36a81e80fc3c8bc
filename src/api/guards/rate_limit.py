from src.api.error import RateLimitExceeded
from src.app.services.rate_limiter import RateLimiter
from src.libs.result import Error

from .base import ALLOW, Decision, Deny, Guard, GuardContext


class RateLimitGuard(Guard):
    name = "RateLimiter"

    def __init__(self, limiter: RateLimiter):
        self.limiter = limiter

    async def check(self, ctx: GuardContext) -> Decision:
        decision = await self.limiter.check(str(ctx.user_id))
        if decision.allowed:
            return ALLOW
        return Deny(
            RateLimitExceeded(
                Error("RATE_LIMIT_EXCEEDED", "Too many requests, please try again later"),
                retry_after=decision.retry_after,
            )
        )
