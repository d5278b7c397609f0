"""Merchant entity and its value objects."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from src.core.clock import utc_now


class MerchantStatus(str, Enum):
    """Merchant account status."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    CLOSED = "closed"


class KycStatus(str, Enum):
    """KYC verification status."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class BankAccountStatus(str, Enum):
    """Bank account verification status."""

    NOT_VERIFIED = "not_verified"
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class BusinessType(str, Enum):
    """Legal form of the merchant's business."""

    INDIVIDUAL = "individual"
    SOLE_PROPRIETORSHIP = "sole_proprietorship"
    PARTNERSHIP = "partnership"
    LLC = "llc"
    CORPORATION = "corporation"
    NON_PROFIT = "non_profit"


class SettlementFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class KycDocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class KycDocument:
    """A document uploaded as part of a KYC submission."""

    type: str
    file_name: str
    file_url: str
    uploaded_at: datetime = field(default_factory=utc_now)
    status: KycDocumentStatus = KycDocumentStatus.PENDING
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "file_name": self.file_name,
            "file_url": self.file_url,
            "uploaded_at": self.uploaded_at.isoformat(),
            "status": self.status.value,
            "rejection_reason": self.rejection_reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "KycDocument":
        return cls(
            type=data["type"],
            file_name=data["file_name"],
            file_url=data["file_url"],
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
            status=KycDocumentStatus(data.get("status", "pending")),
            rejection_reason=data.get("rejection_reason"),
        )


@dataclass(frozen=True)
class NotificationPreferences:
    """Which notifications the merchant wants to receive."""

    email_notifications: bool = True
    sms_notifications: bool = False
    push_notifications: bool = True
    payment_received: bool = True
    settlement_completed: bool = True
    kyc_status_update: bool = True
    security_alerts: bool = True
    marketing_emails: bool = False

    def merge(self, changes: Dict[str, bool]) -> "NotificationPreferences":
        """Return a copy with ``changes`` laid over the current values."""
        current = self.to_dict()
        current.update({k: v for k, v in changes.items() if k in current})
        return NotificationPreferences(**current)

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NotificationPreferences":
        if not data:
            return cls()
        return cls().merge(data)


@dataclass
class Merchant:
    """
    A merchant account on the payments platform.

    The merchant moves through account, KYC, and bank account lifecycles
    independently; the rules governing those moves live in
    ``src.service.lifecycle`` and are enforced by ``MerchantService``.
    """

    name: str
    email: str
    password_hash: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    # Business details
    business_name: Optional[str] = None
    business_type: Optional[BusinessType] = None
    business_registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    business_description: Optional[str] = None
    business_category: Optional[str] = None

    # Address
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    status: MerchantStatus = MerchantStatus.PENDING

    # KYC
    kyc_status: KycStatus = KycStatus.NOT_STARTED
    kyc_submitted_at: Optional[datetime] = None
    kyc_verified_at: Optional[datetime] = None
    kyc_rejection_reason: Optional[str] = None
    kyc_documents: List[KycDocument] = field(default_factory=list)

    # Email verification
    email_verified: bool = False
    email_verification_token: Optional[str] = None
    email_verification_expires_at: Optional[datetime] = None
    email_verified_at: Optional[datetime] = None

    # Bank account
    bank_account_number: Optional[str] = None
    bank_routing_number: Optional[str] = None
    bank_account_holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    bank_swift_code: Optional[str] = None
    bank_iban: Optional[str] = None
    bank_account_status: BankAccountStatus = BankAccountStatus.NOT_VERIFIED
    bank_verified_at: Optional[datetime] = None

    # Currencies
    supported_currencies: List[str] = field(default_factory=lambda: ["USD"])
    default_currency: str = "USD"

    # Settlement
    settlement_frequency: SettlementFrequency = SettlementFrequency.DAILY
    minimum_settlement_amount: Decimal = Decimal("0")
    auto_settlement_enabled: bool = True

    notification_preferences: NotificationPreferences = field(
        default_factory=NotificationPreferences
    )

    # API quota
    api_quota_limit: int = 1000
    api_quota_used: int = 0
    api_quota_reset_at: Optional[datetime] = None

    metadata: Dict[str, Any] = field(default_factory=dict)
    suspension_reason: Optional[str] = None
    closed_at: Optional[datetime] = None
    closed_reason: Optional[str] = None

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_suspended(self) -> bool:
        return self.status == MerchantStatus.SUSPENDED

    @property
    def is_closed(self) -> bool:
        return self.status == MerchantStatus.CLOSED

    @property
    def api_quota_remaining(self) -> int:
        return max(self.api_quota_limit - self.api_quota_used, 0)

    def verification_token_expired(self, now: datetime) -> bool:
        """True when the pending verification token is past its expiry."""
        return (
            self.email_verification_expires_at is not None
            and self.email_verification_expires_at < now
        )
