"""Merchant-related Pydantic schemas."""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.entities import (
    BusinessType,
    KycStatus,
    MerchantStatus,
    SettlementFrequency,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
CURRENCY_PATTERN = r"^[A-Za-z]{3}$"


# =============================================================================
# Requests
# =============================================================================

class RegisterMerchantSchema(BaseModel):
    """Schema for POST /v1/merchants/register request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane@acme.example",
                    "password": "s3cure-passw0rd",
                    "business_name": "Acme Coffee",
                    "business_type": "llc",
                }
            ]
        }
    )

    name: str = Field(..., min_length=2, max_length=255, description="Contact name")
    email: str = Field(
        ...,
        max_length=255,
        pattern=EMAIL_PATTERN,
        description="Login and notification email address",
        examples=["jane@acme.example"],
    )
    password: str = Field(..., min_length=8, max_length=128)
    business_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=500)
    business_type: Optional[BusinessType] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not just whitespace."""
        if not v.strip():
            raise ValueError("name cannot be empty or whitespace")
        return v.strip()


class VerifyEmailSchema(BaseModel):
    token: str = Field(..., min_length=1, max_length=255, description="Email verification token")


class ResendVerificationSchema(BaseModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class UpdateProfileSchema(BaseModel):
    """Schema for PATCH /v1/merchants/{id}/profile; omitted fields are unchanged."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    business_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=500)
    business_type: Optional[BusinessType] = None
    business_description: Optional[str] = Field(None, max_length=2000)
    business_category: Optional[str] = Field(None, max_length=100)


class UpdateBusinessDetailsSchema(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=255)
    business_type: BusinessType
    business_registration_number: Optional[str] = Field(
        None,
        description="Company registration number (5-50 characters)",
    )
    tax_id: Optional[str] = Field(None, description="Tax identifier (5-50 characters)")
    business_description: Optional[str] = Field(None, max_length=2000)
    business_category: Optional[str] = Field(None, max_length=100)


class AddressSchema(BaseModel):
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(
        ...,
        pattern=r"^[A-Za-z]{2}$",
        description="ISO 3166-1 alpha-2 country code",
        examples=["US"],
    )


class BankAccountSchema(BaseModel):
    """
    Schema for PUT /v1/merchants/{id}/bank-account.

    Field formats are checked by the merchant service so that the error
    names the offending field.
    """

    account_number: str = Field(..., min_length=1, max_length=34, examples=["000123456789"])
    account_holder_name: str = Field(..., min_length=1, max_length=255)
    bank_name: str = Field(..., min_length=1, max_length=255)
    routing_number: Optional[str] = Field(None, max_length=20, examples=["021000021"])
    swift_code: Optional[str] = Field(None, max_length=11)
    iban: Optional[str] = Field(None, max_length=34)


class KycDocumentSchema(BaseModel):
    type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Document type, e.g. government_id or proof_of_address",
    )
    file_name: str = Field(..., min_length=1, max_length=255)
    file_url: str = Field(..., min_length=1, max_length=2000)


class SubmitKycSchema(BaseModel):
    documents: list[KycDocumentSchema] = Field(..., min_length=1)


class VerifyKycSchema(BaseModel):
    decision: Literal["approved", "rejected"]
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class SettlementPreferencesSchema(BaseModel):
    settlement_frequency: Optional[SettlementFrequency] = None
    minimum_settlement_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    auto_settlement_enabled: Optional[bool] = None


class NotificationPreferencesSchema(BaseModel):
    """Schema for PATCH /v1/merchants/{id}/notification-preferences; omitted flags are unchanged."""

    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    payment_received: Optional[bool] = None
    settlement_completed: Optional[bool] = None
    kyc_status_update: Optional[bool] = None
    security_alerts: Optional[bool] = None
    marketing_emails: Optional[bool] = None


class CurrencySettingsSchema(BaseModel):
    supported_currencies: list[str] = Field(..., min_length=1, examples=[["USD", "EUR"]])
    default_currency: str = Field(..., pattern=CURRENCY_PATTERN, examples=["USD"])

    @field_validator("supported_currencies")
    @classmethod
    def validate_codes(cls, v: list[str]) -> list[str]:
        """Ensure every entry looks like an ISO 4217 code."""
        for code in v:
            if len(code) != 3 or not code.isalpha():
                raise ValueError(f"invalid currency code: {code}")
        return v


class ChangeStatusSchema(BaseModel):
    status: MerchantStatus
    reason: Optional[str] = Field(None, max_length=1000)


class StatusReasonSchema(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class UpdateApiQuotaSchema(BaseModel):
    api_quota_limit: int = Field(..., ge=0, le=1_000_000)


# =============================================================================
# Responses
# =============================================================================

class KycDocumentResponseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    file_name: str
    file_url: str
    uploaded_at: str
    status: str
    rejection_reason: Optional[str] = None


class MerchantResponseSchema(BaseModel):
    """Merchant as returned by the API. Bank account numbers are masked."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    business_name: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    business_type: Optional[str] = None
    business_registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    business_description: Optional[str] = None
    business_category: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    status: str = Field(..., examples=["pending"])
    kyc_status: str = Field(..., examples=["not_started"])
    kyc_submitted_at: Optional[str] = None
    kyc_verified_at: Optional[str] = None
    kyc_rejection_reason: Optional[str] = None
    kyc_documents: list[KycDocumentResponseSchema] = []
    email_verified: bool
    email_verified_at: Optional[str] = None
    bank_account_status: str
    bank_account_last4: Optional[str] = None
    bank_name: Optional[str] = None
    bank_verified_at: Optional[str] = None
    supported_currencies: list[str]
    default_currency: str
    settlement_frequency: str
    minimum_settlement_amount: str
    auto_settlement_enabled: bool
    notification_preferences: dict[str, bool]
    api_quota_limit: int
    api_quota_used: int
    api_quota_reset_at: Optional[str] = None
    suspension_reason: Optional[str] = None
    closed_at: Optional[str] = None
    closed_reason: Optional[str] = None
    created_at: str
    updated_at: str


class PaginatedMerchantsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    data: list[MerchantResponseSchema]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)


class MerchantAnalyticsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_payments: int
    total_payment_amount: str
    total_settlements: int
    total_settled_amount: str
    pending_settlements: int
    pending_settlement_amount: str
    average_payment_amount: str
    api_quota_used: int
    api_quota_limit: int
    api_quota_percentage: float


class MerchantStatisticsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    active: int
    pending: int
    suspended: int
    closed: int
    kyc_pending: int
    kyc_approved: int
    kyc_rejected: int


class QuotaStatusSchema(BaseModel):
    api_quota_used: int
    api_quota_limit: int
    api_quota_remaining: int
    api_quota_reset_at: Optional[str] = None


class MessageSchema(BaseModel):
    message: str


class MerchantSearchParams(BaseModel):
    """Query parameters for GET /v1/admin/merchants."""

    search: Optional[str] = Field(None, max_length=255)
    status: Optional[MerchantStatus] = None
    kyc_status: Optional[KycStatus] = None
    business_type: Optional[BusinessType] = None
    country: Optional[str] = Field(None, pattern=r"^[A-Za-z]{2}$")
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    sort_by: Literal[
        "created_at", "updated_at", "name", "email", "business_name", "status"
    ] = "created_at"
    sort_order: Literal["ASC", "DESC", "asc", "desc"] = "DESC"
