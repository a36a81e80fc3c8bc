"""
Admin Guard Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AlertType(str, Enum):
    """Heuristic that produced a security alert"""

    brute_force = "brute_force"
    suspicious_login = "suspicious_login"
    multiple_sessions = "multiple_sessions"


class AlertSeverity(str, Enum):
    """Security alert severity"""

    low = "low"
    medium = "medium"
    high = "high"


class SystemRoleName(str, Enum):
    """Built-in roles; admin and moderator grant console access"""

    admin = "admin"
    moderator = "moderator"
    user = "user"
    guest = "guest"


# Roles allowed through the admin console gate
ADMIN_ROLE_NAMES = (SystemRoleName.admin.value, SystemRoleName.moderator.value)
