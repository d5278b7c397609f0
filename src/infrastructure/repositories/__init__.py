"""Repository implementations."""

from .merchant_repository import PostgresMerchantRepository
from .admin_repository import (
    PostgresAdminUserRepository,
    PostgresAdminSessionRepository,
    PostgresAdminLoginAttemptRepository,
)

__all__ = [
    "PostgresMerchantRepository",
    "PostgresAdminUserRepository",
    "PostgresAdminSessionRepository",
    "PostgresAdminLoginAttemptRepository",
]
