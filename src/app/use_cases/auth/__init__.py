"""
Authentication Use Cases
"""

from .dtos import LoginResponse, LogoutResponse, RoleInfo, UserProfile
from .load_context_use_case import LoadContextUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase

__all__ = [
    # Use Cases
    "LoginUseCase",
    "LogoutUseCase",
    "LoadContextUseCase",
    # DTOs
    "LoginResponse",
    "LogoutResponse",
    "RoleInfo",
    "UserProfile",
]
