"""
User Management Use Cases

Admin-console operations on user accounts.
"""

from .create_user_use_case import CreateUserUseCase
from .list_users_use_case import GetUserUseCase, ListUsersUseCase
from .lock_user_use_case import LockUserUseCase
from .reset_password_use_case import MIN_PASSWORD_LENGTH, ResetPasswordUseCase
from .update_user_use_case import DeleteUserUseCase, UpdateUserUseCase
from .user_sessions_use_case import UserSessionsUseCase

__all__ = [
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
    "LockUserUseCase",
    "MIN_PASSWORD_LENGTH",
    "ResetPasswordUseCase",
    "UpdateUserUseCase",
    "UserSessionsUseCase",
]
