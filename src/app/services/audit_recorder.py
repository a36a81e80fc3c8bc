"""
Audit Recorder

Post-handler callback that turns a successful admin call into one immutable
audit entry. The dispatcher invokes `record` with the handler's outcome; the
recorder never alters that outcome.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditInput:
    """What the dispatcher knows about the call being audited"""

    actor_id: UUID
    path_params: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class HandlerOutcome:
    """Status code and result value produced by a protected handler"""

    status_code: int
    value: Any = None

    @property
    def succeeded(self) -> bool:
        return 200 <= self.status_code < 300


TargetIdExtractor = Callable[[AuditInput, Any], Optional[Any]]
ChangesExtractor = Callable[[AuditInput, Any], Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class AuditAction:
    """An audited action key plus the extractors for its target and changes"""

    action: str
    target_type: Optional[str] = None
    target_id: Optional[TargetIdExtractor] = None
    changes: Optional[ChangesExtractor] = None


def from_path(name: str) -> TargetIdExtractor:
    return lambda call, value: call.path_params.get(name)


def from_body(name: str) -> TargetIdExtractor:
    return lambda call, value: call.body.get(name)


def from_result(*keys: str) -> TargetIdExtractor:
    """Walk nested keys of the handler's result value, e.g. ("user", "id")."""

    def extract(call: AuditInput, value: Any) -> Optional[Any]:
        current = value
        for key in keys:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        return current

    return extract


def first_of(*extractors: TargetIdExtractor) -> TargetIdExtractor:
    def extract(call: AuditInput, value: Any) -> Optional[Any]:
        for extractor in extractors:
            found = extractor(call, value)
            if found is not None:
                return found
        return None

    return extract


def accepted_fields(*names: str) -> ChangesExtractor:
    """Shallow diff: the accepted body fields that were actually supplied."""

    def extract(call: AuditInput, value: Any) -> Optional[Dict[str, Any]]:
        changes = {
            name: call.body[name]
            for name in names
            if name in call.body and call.body[name] is not None
        }
        return changes or None

    return extract


def result_fields(*names: str) -> ChangesExtractor:
    """Pick top-level keys of the handler's result value."""

    def extract(call: AuditInput, value: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(value, dict):
            return None
        changes = {name: value[name] for name in names if value.get(name) is not None}
        return changes or None

    return extract


def with_path(extractor: Optional[ChangesExtractor] = None, **path_fields: str) -> ChangesExtractor:
    """Add path parameters (renamed) to another changes extractor's output."""

    def extract(call: AuditInput, value: Any) -> Optional[Dict[str, Any]]:
        changes = dict(extractor(call, value) or {}) if extractor else {}
        for out_name, param in path_fields.items():
            if param in call.path_params:
                changes[out_name] = call.path_params[param]
        return changes or None

    return extract


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


class AuditRecorder:
    """
    Persists one AuditLog per successful (2xx) outcome.

    Durability is best-effort: a persistence failure is logged for follow-up
    and swallowed so a successful business outcome is never turned into an
    error for the caller.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def build_entry(
        self, action: AuditAction, call: AuditInput, outcome: HandlerOutcome
    ) -> AuditLog:
        target_id = action.target_id(call, outcome.value) if action.target_id else None
        changes = action.changes(call, outcome.value) if action.changes else None

        return AuditLog(
            admin_id=call.actor_id,
            action=action.action,
            target_type=action.target_type,
            target_id=str(target_id) if target_id is not None else None,
            changes=_jsonable(changes) if changes else None,
            ip_address=call.ip_address,
            user_agent=call.user_agent,
        )

    async def record(
        self, action: AuditAction, call: AuditInput, outcome: HandlerOutcome
    ) -> Optional[AuditLog]:
        """
        Post-handler callback.

        Returns:
            The persisted entry, or None when nothing was written
        """
        if not outcome.succeeded:
            return None

        try:
            entry = self.build_entry(action, call, outcome)
            async with self.uow:
                await self.uow.audit_logs.create(entry)
                await self.uow.commit()
        except Exception:
            logger.exception(
                f"[AUDIT] Failed to persist {action.action} by {call.actor_id}; "
                f"entry lost"
            )
            return None

        logger.info(
            f"[AUDIT] {call.actor_id} performed {action.action} on "
            f"{entry.target_type} {entry.target_id}"
        )
        return entry
