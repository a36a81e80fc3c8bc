"""
Role Management Use Cases
"""

from .role_assignment_use_case import RoleAssignmentUseCase
from .role_management_use_case import RoleManagementUseCase
from .seed_system_roles_use_case import SeedSystemRolesUseCase

__all__ = [
    "RoleAssignmentUseCase",
    "RoleManagementUseCase",
    "SeedSystemRolesUseCase",
]
