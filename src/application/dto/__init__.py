"""Data Transfer Objects for application layer."""

from .merchant import (
    RegisterMerchantRequest,
    UpdateProfileRequest,
    UpdateBusinessDetailsRequest,
    AddressRequest,
    BankAccountRequest,
    KycDocumentInput,
    SubmitKycRequest,
    VerifyKycRequest,
    SettlementPreferencesRequest,
    NotificationPreferencesRequest,
    CurrencySettingsRequest,
    ChangeStatusRequest,
    UpdateApiQuotaRequest,
    SearchMerchantsRequest,
    MerchantResponse,
    PaginatedMerchantsResponse,
    MerchantAnalyticsResponse,
)
from .admin_auth import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminRefreshResponse,
    AdminProfile,
)

__all__ = [
    "RegisterMerchantRequest",
    "UpdateProfileRequest",
    "UpdateBusinessDetailsRequest",
    "AddressRequest",
    "BankAccountRequest",
    "KycDocumentInput",
    "SubmitKycRequest",
    "VerifyKycRequest",
    "SettlementPreferencesRequest",
    "NotificationPreferencesRequest",
    "CurrencySettingsRequest",
    "ChangeStatusRequest",
    "UpdateApiQuotaRequest",
    "SearchMerchantsRequest",
    "MerchantResponse",
    "PaginatedMerchantsResponse",
    "MerchantAnalyticsResponse",
    "AdminLoginRequest",
    "AdminLoginResponse",
    "AdminRefreshResponse",
    "AdminProfile",
]
