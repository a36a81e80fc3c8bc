"""
Guard Pipeline

Each guard inspects the shared GuardContext and returns Allow or Deny. The
pipeline runs guards in list order and stops at the first Deny, so ordering
is data rather than call nesting.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from src.api.error import ClientError, ServerError
from src.api.utils.jwt import TokenClaims
from src.app.services.audit_recorder import AuditInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allow:
    pass


ALLOW = Allow()


@dataclass(frozen=True)
class Deny:
    error: Union[ClientError, ServerError]

    @property
    def code(self) -> str:
        return self.error.base_error.code


Decision = Union[Allow, Deny]


@dataclass(frozen=True)
class RoleGrant:
    name: str
    permissions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "permissions": list(self.permissions)}


@dataclass
class GuardContext:
    """Request facts plus everything guards resolve along the way"""

    token: Optional[str]
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    path_params: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)

    claims: Optional[TokenClaims] = None
    user_id: Optional[UUID] = None
    email: Optional[str] = None
    session_id: Optional[UUID] = None
    roles: List[RoleGrant] = field(default_factory=list)


@dataclass(frozen=True)
class AdminContext:
    """Resolved identity handed to protected handlers"""

    user_id: UUID
    email: Optional[str]
    session_id: UUID
    roles: Tuple[RoleGrant, ...] = ()
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    path_params: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_context(cls, ctx: GuardContext) -> "AdminContext":
        return cls(
            user_id=ctx.user_id,
            email=ctx.email,
            session_id=ctx.session_id,
            roles=tuple(ctx.roles),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            path_params=dict(ctx.path_params),
            body=dict(ctx.body),
        )

    def has_permission(self, permission: str) -> bool:
        return any(permission in role.permissions for role in self.roles)

    def identity(self) -> Dict[str, Any]:
        return {
            "id": str(self.user_id),
            "email": self.email,
            "roles": [role.to_dict() for role in self.roles],
        }

    def audit_input(self) -> AuditInput:
        return AuditInput(
            actor_id=self.user_id,
            path_params=self.path_params,
            body=self.body,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )


class Guard(ABC):
    name: str = "guard"

    @abstractmethod
    async def check(self, ctx: GuardContext) -> Decision:
        pass


class GuardPipeline:
    def __init__(self, guards: Sequence[Guard]):
        self.guards = list(guards)

    async def run(self, ctx: GuardContext) -> Decision:
        for guard in self.guards:
            decision = await guard.check(ctx)
            if isinstance(decision, Deny):
                logger.info(
                    f"{guard.name} denied request from {ctx.ip_address} "
                    f"(user {ctx.user_id}): {decision.code}"
                )
                return decision
        return ALLOW

    async def enforce(self, ctx: GuardContext) -> AdminContext:
        """Run the pipeline and raise the first denial as an HTTP error"""
        decision = await self.run(ctx)
        if isinstance(decision, Deny):
            raise decision.error
        return AdminContext.from_context(ctx)
