"""
Status Transition Tables for the merchant lifecycle.

Both tables map a source status to the frozen set of statuses it may move
to. They are read-only; callers check membership before mutating anything.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping

from src.domain.entities import KycStatus, MerchantStatus

STATUS_TRANSITIONS: Mapping[MerchantStatus, FrozenSet[MerchantStatus]] = MappingProxyType(
    {
        MerchantStatus.PENDING: frozenset(
            {MerchantStatus.ACTIVE, MerchantStatus.SUSPENDED, MerchantStatus.CLOSED}
        ),
        MerchantStatus.ACTIVE: frozenset(
            {MerchantStatus.INACTIVE, MerchantStatus.SUSPENDED, MerchantStatus.CLOSED}
        ),
        MerchantStatus.INACTIVE: frozenset(
            {MerchantStatus.ACTIVE, MerchantStatus.SUSPENDED, MerchantStatus.CLOSED}
        ),
        MerchantStatus.SUSPENDED: frozenset(
            {MerchantStatus.ACTIVE, MerchantStatus.CLOSED}
        ),
        MerchantStatus.CLOSED: frozenset(),
    }
)

# PENDING -> PENDING covers a merchant replacing documents before review starts.
KYC_TRANSITIONS: Mapping[KycStatus, FrozenSet[KycStatus]] = MappingProxyType(
    {
        KycStatus.NOT_STARTED: frozenset({KycStatus.PENDING}),
        KycStatus.PENDING: frozenset(
            {
                KycStatus.PENDING,
                KycStatus.IN_REVIEW,
                KycStatus.APPROVED,
                KycStatus.REJECTED,
            }
        ),
        KycStatus.IN_REVIEW: frozenset({KycStatus.APPROVED, KycStatus.REJECTED}),
        KycStatus.APPROVED: frozenset({KycStatus.EXPIRED}),
        KycStatus.REJECTED: frozenset({KycStatus.PENDING}),
        KycStatus.EXPIRED: frozenset({KycStatus.PENDING}),
    }
)

# States from which an admin may record a KYC decision.
KYC_DECIDABLE_STATUSES: FrozenSet[KycStatus] = frozenset(
    {KycStatus.PENDING, KycStatus.IN_REVIEW}
)


def can_transition(current: MerchantStatus, requested: MerchantStatus) -> bool:
    """Check whether the account status may move from ``current`` to ``requested``."""
    return requested in STATUS_TRANSITIONS.get(current, frozenset())


def can_transition_kyc(current: KycStatus, requested: KycStatus) -> bool:
    """Check whether the KYC status may move from ``current`` to ``requested``."""
    return requested in KYC_TRANSITIONS.get(current, frozenset())


def is_terminal(status: MerchantStatus) -> bool:
    """A status with no outgoing transitions."""
    return not STATUS_TRANSITIONS.get(status)
