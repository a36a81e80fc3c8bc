"""
Admin Access Dependencies

Builds the guard pipeline for a route and exposes it as a FastAPI dependency
that resolves to the caller's AdminContext.
"""

from typing import Callable, List, Optional

from fastapi import Depends, Request

from config import ApplicationConfig
from src.api.error import RateLimitExceeded
from src.api.guards import (
    AccountLockGate,
    AdminContext,
    Guard,
    GuardContext,
    GuardPipeline,
    IPBlockGate,
    RateLimitGuard,
    RequireAdmin,
    RequirePermission,
    SelfTargetGuard,
    SessionGate,
    TokenVerifier,
)
from src.api.guards.authorization import TargetExtractor
from src.api.utils.jwt import extract_token
from src.api.utils.request_meta import client_ip, json_body, user_agent
from src.app.services.counter_store import IRateWindowStore
from src.app.services.rate_limiter import RateLimiter, RateLimitPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.depends import (
    get_admin_rate_limit_policy,
    get_clock,
    get_login_rate_limit_policy,
    get_rate_window_store,
    get_unit_of_work,
)
from src.libs.result import Error


async def build_context(request: Request) -> GuardContext:
    return GuardContext(
        token=extract_token(request),
        ip_address=client_ip(request),
        user_agent=user_agent(request),
        path_params=dict(request.path_params),
        body=await json_body(request),
    )


def admin_guards(
    uow: UnitOfWork,
    limiter: RateLimiter,
    permission: Optional[str] = None,
    self_target: Optional[TargetExtractor] = None,
) -> List[Guard]:
    """token -> session -> lock -> IP -> role -> permission -> self-target -> rate limit"""
    guards: List[Guard] = [
        TokenVerifier(),
        SessionGate(uow),
        AccountLockGate(uow),
        IPBlockGate(uow),
        RequireAdmin(uow),
    ]
    if permission:
        guards.append(RequirePermission(permission))
    if self_target:
        guards.append(SelfTargetGuard(self_target))
    guards.append(RateLimitGuard(limiter))
    return guards


def admin_access(
    permission: Optional[str] = None,
    self_target: Optional[TargetExtractor] = None,
) -> Callable:
    """
    Dependency factory for admin-console routes.

    Args:
        permission: Permission string the caller's admin roles must grant
        self_target: Extractor for the target user id; equal to the caller => 400
    """

    async def dependency(
        request: Request,
        uow: UnitOfWork = Depends(get_unit_of_work),
        store: IRateWindowStore = Depends(get_rate_window_store),
        policy: RateLimitPolicy = Depends(get_admin_rate_limit_policy),
        clock: Callable[[], float] = Depends(get_clock),
    ) -> AdminContext:
        limiter = RateLimiter(
            store,
            policy,
            clock=clock,
            prune_probability=ApplicationConfig.RATE_LIMIT_PRUNE_PROBABILITY,
        )
        ctx = await build_context(request)
        pipeline = GuardPipeline(admin_guards(uow, limiter, permission, self_target))
        return await pipeline.enforce(ctx)

    return dependency


async def authenticated(
    request: Request, uow: UnitOfWork = Depends(get_unit_of_work)
) -> AdminContext:
    """Any signed-in, unlocked user"""
    ctx = await build_context(request)
    pipeline = GuardPipeline([TokenVerifier(), SessionGate(uow), AccountLockGate(uow)])
    return await pipeline.enforce(ctx)


async def session_only(
    request: Request, uow: UnitOfWork = Depends(get_unit_of_work)
) -> AdminContext:
    """Valid session, lock state ignored (logout must work for locked accounts)"""
    ctx = await build_context(request)
    pipeline = GuardPipeline([TokenVerifier(), SessionGate(uow)])
    return await pipeline.enforce(ctx)


async def login_throttle(
    request: Request,
    store: IRateWindowStore = Depends(get_rate_window_store),
    policy: RateLimitPolicy = Depends(get_login_rate_limit_policy),
    clock: Callable[[], float] = Depends(get_clock),
) -> None:
    """Bounds login attempts per client address, successful or not"""
    limiter = RateLimiter(
        store,
        policy,
        clock=clock,
        prune_probability=ApplicationConfig.RATE_LIMIT_PRUNE_PROBABILITY,
    )
    decision = await limiter.check(client_ip(request) or "unknown")
    if not decision.allowed:
        raise RateLimitExceeded(
            Error("RATE_LIMIT_EXCEEDED", "Too many login attempts, please try again later"),
            retry_after=decision.retry_after,
        )
