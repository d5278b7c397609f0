"""Pydantic schemas for API request/response validation."""

from .merchant import (
    RegisterMerchantSchema,
    VerifyEmailSchema,
    ResendVerificationSchema,
    UpdateProfileSchema,
    UpdateBusinessDetailsSchema,
    AddressSchema,
    BankAccountSchema,
    KycDocumentSchema,
    SubmitKycSchema,
    VerifyKycSchema,
    SettlementPreferencesSchema,
    NotificationPreferencesSchema,
    CurrencySettingsSchema,
    ChangeStatusSchema,
    StatusReasonSchema,
    UpdateApiQuotaSchema,
    MerchantResponseSchema,
    PaginatedMerchantsSchema,
    MerchantAnalyticsSchema,
    MerchantStatisticsSchema,
    QuotaStatusSchema,
    MessageSchema,
    MerchantSearchParams,
)
from .admin_auth import (
    AdminLoginSchema,
    AdminRefreshSchema,
    AdminLogoutSchema,
    AdminProfileSchema,
    AdminLoginResponseSchema,
    AdminRefreshResponseSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "RegisterMerchantSchema",
    "VerifyEmailSchema",
    "ResendVerificationSchema",
    "UpdateProfileSchema",
    "UpdateBusinessDetailsSchema",
    "AddressSchema",
    "BankAccountSchema",
    "KycDocumentSchema",
    "SubmitKycSchema",
    "VerifyKycSchema",
    "SettlementPreferencesSchema",
    "NotificationPreferencesSchema",
    "CurrencySettingsSchema",
    "ChangeStatusSchema",
    "StatusReasonSchema",
    "UpdateApiQuotaSchema",
    "MerchantResponseSchema",
    "PaginatedMerchantsSchema",
    "MerchantAnalyticsSchema",
    "MerchantStatisticsSchema",
    "QuotaStatusSchema",
    "MessageSchema",
    "MerchantSearchParams",
    "AdminLoginSchema",
    "AdminRefreshSchema",
    "AdminLogoutSchema",
    "AdminProfileSchema",
    "AdminLoginResponseSchema",
    "AdminRefreshResponseSchema",
    "ErrorResponseSchema",
]
