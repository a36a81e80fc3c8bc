from .account import AccountLockGate, IPBlockGate
from .authentication import SessionGate, TokenVerifier
from .authorization import (
    RequireAdmin,
    RequirePermission,
    SelfTargetGuard,
    body_field,
    path_param,
)
from .base import (
    ALLOW,
    AdminContext,
    Allow,
    Deny,
    Guard,
    GuardContext,
    GuardPipeline,
    RoleGrant,
)
from .rate_limit import RateLimitGuard

__all__ = [
    "ALLOW",
    "AccountLockGate",
    "AdminContext",
    "Allow",
    "Deny",
    "Guard",
    "GuardContext",
    "GuardPipeline",
    "IPBlockGate",
    "RateLimitGuard",
    "RequireAdmin",
    "RequirePermission",
    "RoleGrant",
    "SelfTargetGuard",
    "SessionGate",
    "TokenVerifier",
    "body_field",
    "path_param",
]
