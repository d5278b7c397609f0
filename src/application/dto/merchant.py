"""Data transfer objects for merchant operations."""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from src.domain.entities import (
    BusinessType,
    KycStatus,
    Merchant,
    MerchantStatus,
    SettlementFrequency,
)


@dataclass(frozen=True)
class RegisterMerchantRequest:
    """Input data for registering a new merchant."""

    name: str
    email: str
    password: str
    business_name: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    business_type: Optional[BusinessType] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.name or len(self.name.strip()) < 2:
            errors.append("name must be at least 2 characters")

        if not self.email or "@" not in self.email:
            errors.append("email must be a valid email address")

        if not self.password or len(self.password) < 8:
            errors.append("password must be at least 8 characters")

        return errors


@dataclass(frozen=True)
class UpdateProfileRequest:
    """Partial profile update; fields left as None are not changed."""

    name: Optional[str] = None
    business_name: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    business_type: Optional[BusinessType] = None
    business_description: Optional[str] = None
    business_category: Optional[str] = None


@dataclass(frozen=True)
class UpdateBusinessDetailsRequest:
    business_name: str
    business_type: BusinessType
    business_registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    business_description: Optional[str] = None
    business_category: Optional[str] = None


@dataclass(frozen=True)
class AddressRequest:
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str
    address_line2: Optional[str] = None


@dataclass(frozen=True)
class BankAccountRequest:
    account_number: str
    account_holder_name: str
    bank_name: str
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    iban: Optional[str] = None


@dataclass(frozen=True)
class KycDocumentInput:
    type: str
    file_name: str
    file_url: str


@dataclass(frozen=True)
class SubmitKycRequest:
    documents: List[KycDocumentInput]


@dataclass(frozen=True)
class VerifyKycRequest:
    """Admin decision on a KYC submission."""

    decision: str
    rejection_reason: Optional[str] = None

    @property
    def approved(self) -> bool:
        return self.decision == "approved"


@dataclass(frozen=True)
class SettlementPreferencesRequest:
    settlement_frequency: Optional[SettlementFrequency] = None
    minimum_settlement_amount: Optional[Decimal] = None
    auto_settlement_enabled: Optional[bool] = None


@dataclass(frozen=True)
class NotificationPreferencesRequest:
    """Preference flags to change; absent keys keep their current values."""

    changes: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class CurrencySettingsRequest:
    supported_currencies: List[str]
    default_currency: str


@dataclass(frozen=True)
class ChangeStatusRequest:
    status: MerchantStatus
    reason: Optional[str] = None


@dataclass(frozen=True)
class UpdateApiQuotaRequest:
    api_quota_limit: int


@dataclass(frozen=True)
class SearchMerchantsRequest:
    search: Optional[str] = None
    status: Optional[MerchantStatus] = None
    kyc_status: Optional[KycStatus] = None
    business_type: Optional[BusinessType] = None
    country: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None


@dataclass(frozen=True)
class KycDocumentDTO:
    type: str
    file_name: str
    file_url: str
    uploaded_at: str
    status: str
    rejection_reason: Optional[str]


@dataclass(frozen=True)
class MerchantResponse:
    """
    Merchant as exposed to API clients.

    Credentials, verification tokens and full bank account numbers are
    never included.
    """

    id: str
    name: str
    email: str
    business_name: Optional[str]
    phone: Optional[str]
    website: Optional[str]
    business_type: Optional[str]
    business_registration_number: Optional[str]
    tax_id: Optional[str]
    business_description: Optional[str]
    business_category: Optional[str]
    address_line1: Optional[str]
    address_line2: Optional[str]
    city: Optional[str]
    state: Optional[str]
    postal_code: Optional[str]
    country: Optional[str]
    status: str
    kyc_status: str
    kyc_submitted_at: Optional[str]
    kyc_verified_at: Optional[str]
    kyc_rejection_reason: Optional[str]
    kyc_documents: List[KycDocumentDTO]
    email_verified: bool
    email_verified_at: Optional[str]
    bank_account_status: str
    bank_account_last4: Optional[str]
    bank_name: Optional[str]
    bank_verified_at: Optional[str]
    supported_currencies: List[str]
    default_currency: str
    settlement_frequency: str
    minimum_settlement_amount: str
    auto_settlement_enabled: bool
    notification_preferences: Dict[str, bool]
    api_quota_limit: int
    api_quota_used: int
    api_quota_reset_at: Optional[str]
    suspension_reason: Optional[str]
    closed_at: Optional[str]
    closed_reason: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, merchant: Merchant) -> "MerchantResponse":
        return cls(
            id=str(merchant.id),
            name=merchant.name,
            email=merchant.email,
            business_name=merchant.business_name,
            phone=merchant.phone,
            website=merchant.website,
            business_type=merchant.business_type.value if merchant.business_type else None,
            business_registration_number=merchant.business_registration_number,
            tax_id=merchant.tax_id,
            business_description=merchant.business_description,
            business_category=merchant.business_category,
            address_line1=merchant.address_line1,
            address_line2=merchant.address_line2,
            city=merchant.city,
            state=merchant.state,
            postal_code=merchant.postal_code,
            country=merchant.country,
            status=merchant.status.value,
            kyc_status=merchant.kyc_status.value,
            kyc_submitted_at=_iso(merchant.kyc_submitted_at),
            kyc_verified_at=_iso(merchant.kyc_verified_at),
            kyc_rejection_reason=merchant.kyc_rejection_reason,
            kyc_documents=[
                KycDocumentDTO(
                    type=doc.type,
                    file_name=doc.file_name,
                    file_url=doc.file_url,
                    uploaded_at=_iso(doc.uploaded_at),
                    status=doc.status.value,
                    rejection_reason=doc.rejection_reason,
                )
                for doc in merchant.kyc_documents
            ],
            email_verified=merchant.email_verified,
            email_verified_at=_iso(merchant.email_verified_at),
            bank_account_status=merchant.bank_account_status.value,
            bank_account_last4=(
                merchant.bank_account_number[-4:] if merchant.bank_account_number else None
            ),
            bank_name=merchant.bank_name,
            bank_verified_at=_iso(merchant.bank_verified_at),
            supported_currencies=list(merchant.supported_currencies),
            default_currency=merchant.default_currency,
            settlement_frequency=merchant.settlement_frequency.value,
            minimum_settlement_amount=str(merchant.minimum_settlement_amount),
            auto_settlement_enabled=merchant.auto_settlement_enabled,
            notification_preferences=merchant.notification_preferences.to_dict(),
            api_quota_limit=merchant.api_quota_limit,
            api_quota_used=merchant.api_quota_used,
            api_quota_reset_at=_iso(merchant.api_quota_reset_at),
            suspension_reason=merchant.suspension_reason,
            closed_at=_iso(merchant.closed_at),
            closed_reason=merchant.closed_reason,
            created_at=_iso(merchant.created_at),
            updated_at=_iso(merchant.updated_at),
        )


@dataclass(frozen=True)
class PaginatedMerchantsResponse:
    data: List[MerchantResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_entities(
        cls,
        merchants: List[Merchant],
        total: int,
        page: int,
        limit: int,
    ) -> "PaginatedMerchantsResponse":
        return cls(
            data=[MerchantResponse.from_entity(m) for m in merchants],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


@dataclass(frozen=True)
class MerchantAnalyticsResponse:
    """
    Per-merchant activity figures.

    Payment and settlement totals come from systems outside this service
    and are reported as zero here.
    """

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

    @classmethod
    def from_entity(cls, merchant: Merchant) -> "MerchantAnalyticsResponse":
        percentage = (
            round(merchant.api_quota_used / merchant.api_quota_limit * 100, 2)
            if merchant.api_quota_limit
            else 0.0
        )
        zero = str(Decimal("0"))
        return cls(
            total_payments=0,
            total_payment_amount=zero,
            total_settlements=0,
            total_settled_amount=zero,
            pending_settlements=0,
            pending_settlement_amount=zero,
            average_payment_amount=zero,
            api_quota_used=merchant.api_quota_used,
            api_quota_limit=merchant.api_quota_limit,
            api_quota_percentage=percentage,
        )


def _iso(value) -> Optional[str]:
    return value.isoformat() + "Z" if value else None
