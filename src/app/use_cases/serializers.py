"""
Plain-dict views of entities returned by use cases.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from src.domain.entities import AuditLog, BlockedIP, Role, SecurityAlert, Session, User
from src.domain.permissions import primary_role_name


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None


def role_grant(role: Role) -> Dict[str, Any]:
    return {"name": role.name, "permissions": list(role.permissions or [])}


def user_dict(user: User, roles: Sequence[Role] = ()) -> Dict[str, Any]:
    names = [role.name for role in roles]
    return {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        # Legacy single-role view, derived from the assignments only
        "role": primary_role_name(names),
        "roles": [role_grant(role) for role in roles],
        "is_locked": user.is_locked,
        "locked_at": iso(user.locked_at),
        "lock_reason": user.lock_reason,
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
        "last_login_at": iso(user.last_login_at),
    }


def role_dict(role: Role, user_count: Optional[int] = None) -> Dict[str, Any]:
    data = {
        "id": str(role.id),
        "name": role.name,
        "description": role.description,
        "permissions": list(role.permissions or []),
        "is_system": role.is_system,
        "created_at": iso(role.created_at),
        "updated_at": iso(role.updated_at),
    }
    if user_count is not None:
        data["user_count"] = user_count
    return data


def session_dict(session: Session) -> Dict[str, Any]:
    return {
        "id": str(session.id),
        "user_id": str(session.user_id),
        "ip_address": session.ip_address,
        "user_agent": session.user_agent,
        "created_at": iso(session.created_at),
        "expires_at": iso(session.expires_at),
        "revoked_at": iso(session.revoked_at),
    }


def audit_log_dict(entry: AuditLog) -> Dict[str, Any]:
    return {
        "id": str(entry.id),
        "admin_id": str(entry.admin_id),
        "action": entry.action,
        "target_type": entry.target_type,
        "target_id": entry.target_id,
        "changes": entry.changes or {},
        "ip_address": entry.ip_address,
        "user_agent": entry.user_agent,
        "created_at": iso(entry.created_at),
    }


def alert_dict(alert: SecurityAlert) -> Dict[str, Any]:
    return {
        "id": str(alert.id),
        "type": alert.type.value if hasattr(alert.type, "value") else alert.type,
        "severity": alert.severity.value if hasattr(alert.severity, "value") else alert.severity,
        "message": alert.message,
        "metadata": alert.alert_metadata or {},
        "is_reviewed": alert.is_reviewed,
        "reviewed_by": str(alert.reviewed_by) if alert.reviewed_by else None,
        "reviewed_at": iso(alert.reviewed_at),
        "created_at": iso(alert.created_at),
    }


def blocked_ip_dict(blocked: BlockedIP, now: datetime) -> Dict[str, Any]:
    return {
        "id": str(blocked.id),
        "ip_address": blocked.ip_address,
        "reason": blocked.reason,
        "blocked_by": str(blocked.blocked_by) if blocked.blocked_by else None,
        "expires_at": iso(blocked.expires_at),
        "is_active": blocked.is_active(now),
        "created_at": iso(blocked.created_at),
    }


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": (total + limit - 1) // limit if limit else 0,
    }


def grants_of(roles: List[Role]) -> List[Dict[str, Any]]:
    return [role_grant(role) for role in roles]
