"""
Permission catalogue and built-in role definitions.
"""

from typing import Dict, List, Optional, Sequence

from .entities.enums import SystemRoleName

PERMISSION_CATALOG: Dict[str, List[str]] = {
    "Users": ["users.view", "users.create", "users.edit", "users.delete", "users.lock"],
    "Roles": ["roles.view", "roles.create", "roles.edit", "roles.delete", "roles.assign"],
    "Security": [
        "security.view_alerts",
        "security.review_alerts",
        "security.block_ip",
        "security.unblock_ip",
    ],
    "Audit": ["audit.view", "audit.export"],
    "Dashboard": ["dashboard.view", "dashboard.stats"],
}

ALL_PERMISSIONS: List[str] = [p for group in PERMISSION_CATALOG.values() for p in group]

SYSTEM_ROLES: Dict[str, dict] = {
    SystemRoleName.admin.value: {
        "description": "Full access to the admin console",
        "permissions": list(ALL_PERMISSIONS),
    },
    SystemRoleName.moderator.value: {
        "description": "Read access plus account locking",
        "permissions": [
            "users.view",
            "users.lock",
            "security.view_alerts",
            "audit.view",
            "dashboard.view",
        ],
    },
    SystemRoleName.user.value: {
        "description": "Regular signed-in user",
        "permissions": [],
    },
    SystemRoleName.guest.value: {
        "description": "Limited guest access",
        "permissions": [],
    },
}

# Precedence used to derive the read-only legacy ``role`` field
ROLE_PRECEDENCE: List[str] = [
    SystemRoleName.admin.value,
    SystemRoleName.moderator.value,
    SystemRoleName.user.value,
    SystemRoleName.guest.value,
]


def unknown_permissions(permissions: Sequence[str]) -> List[str]:
    return [p for p in permissions if p not in ALL_PERMISSIONS]


def normalize_permissions(permissions: Sequence[str]) -> List[str]:
    """Drop duplicates while keeping the first occurrence order."""
    seen = set()
    ordered = []
    for permission in permissions:
        if permission not in seen:
            seen.add(permission)
            ordered.append(permission)
    return ordered


def primary_role_name(role_names: Sequence[str]) -> Optional[str]:
    """Legacy single-role view derived from the assignments."""
    for name in ROLE_PRECEDENCE:
        if name in role_names:
            return name
    return sorted(role_names)[0] if role_names else None
