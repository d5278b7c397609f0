"""Domain Entities - Core business objects."""

from .merchant import (
    Merchant,
    MerchantStatus,
    KycStatus,
    KycDocument,
    KycDocumentStatus,
    BankAccountStatus,
    BusinessType,
    SettlementFrequency,
    NotificationPreferences,
)
from .admin import (
    AdminUser,
    AdminSession,
    AdminLoginAttempt,
    AdminPrincipal,
    UserRole,
    ADMIN_ROLES,
)
from .search import MerchantSearchCriteria, MerchantStatistics, SORTABLE_FIELDS

__all__ = [
    "Merchant",
    "MerchantStatus",
    "KycStatus",
    "KycDocument",
    "KycDocumentStatus",
    "BankAccountStatus",
    "BusinessType",
    "SettlementFrequency",
    "NotificationPreferences",
    "AdminUser",
    "AdminSession",
    "AdminLoginAttempt",
    "AdminPrincipal",
    "UserRole",
    "ADMIN_ROLES",
    "MerchantSearchCriteria",
    "MerchantStatistics",
    "SORTABLE_FIELDS",
]
