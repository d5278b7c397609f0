"""Application services (use cases)."""

from .merchant_service import MerchantService
from .admin_auth_service import AdminAuthService

__all__ = [
    "MerchantService",
    "AdminAuthService",
]
