"""
Admin Guard Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ADMIN_ROLE_NAMES,
    AlertSeverity,
    AlertType,
    SystemRoleName,
)

# Export all entities
from .user import User
from .session import Session
from .role import Role
from .user_role import UserRole
from .audit_log import AuditLog
from .security_alert import SecurityAlert
from .blocked_ip import BlockedIP

__all__ = [
    # Enums
    "ADMIN_ROLE_NAMES",
    "AlertSeverity",
    "AlertType",
    "SystemRoleName",
    # Entities
    "User",
    "Session",
    "Role",
    "UserRole",
    "AuditLog",
    "SecurityAlert",
    "BlockedIP",
]
