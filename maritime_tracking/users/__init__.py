"""
Users module - company-scoped accounts, roles and permissions.
"""

from maritime_tracking.users.errors import (
    CompanyNotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidUserDataError,
    LastAdminDeletionError,
    UserAdminError,
    UserNotFoundError,
)
from maritime_tracking.users.models import (
    UserProfile,
    UserRole,
    can_delete,
    can_edit,
    can_manage_users,
    can_view,
    is_admin,
    is_manager,
)
from maritime_tracking.users.service import ActiveStatus, UserAdminService

__all__ = [
    # Models
    "UserProfile",
    "UserRole",
    # Permissions
    "can_delete",
    "can_edit",
    "can_manage_users",
    "can_view",
    "is_admin",
    "is_manager",
    # Service
    "ActiveStatus",
    "UserAdminService",
    # Errors
    "CompanyNotFoundError",
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "InvalidUserDataError",
    "LastAdminDeletionError",
    "UserAdminError",
    "UserNotFoundError",
]
