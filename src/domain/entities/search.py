"""Query and aggregate value objects for merchant lookups."""

from dataclasses import dataclass
from typing import Optional

from .merchant import BusinessType, KycStatus, MerchantStatus


SORTABLE_FIELDS = frozenset(
    {"created_at", "updated_at", "name", "email", "business_name", "status"}
)


@dataclass(frozen=True)
class MerchantSearchCriteria:
    """Filters, ordering, and pagination for a merchant search."""

    search: Optional[str] = None
    status: Optional[MerchantStatus] = None
    kyc_status: Optional[KycStatus] = None
    business_type: Optional[BusinessType] = None
    country: Optional[str] = None
    page: int = 1
    limit: int = 20
    sort_by: str = "created_at"
    sort_order: str = "DESC"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class MerchantStatistics:
    """Merchant counts by account and KYC status."""

    total: int = 0
    active: int = 0
    pending: int = 0
    suspended: int = 0
    closed: int = 0
    kyc_pending: int = 0
    kyc_approved: int = 0
    kyc_rejected: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "active": self.active,
            "pending": self.pending,
            "suspended": self.suspended,
            "closed": self.closed,
            "kyc_pending": self.kyc_pending,
            "kyc_approved": self.kyc_approved,
            "kyc_rejected": self.kyc_rejected,
        }
