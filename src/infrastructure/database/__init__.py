"""Database infrastructure."""

from .connection import get_db_session, DatabaseSessionManager, db_manager
from .models import (
    Base,
    MerchantModel,
    AdminUserModel,
    AdminSessionModel,
    AdminLoginAttemptModel,
)

__all__ = [
    "get_db_session",
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "MerchantModel",
    "AdminUserModel",
    "AdminSessionModel",
    "AdminLoginAttemptModel",
]
