"""
Merchant Lifecycle Rules
"""

from .settings import LifecycleSettings, lifecycle_settings
from .transitions import (
    STATUS_TRANSITIONS,
    KYC_TRANSITIONS,
    KYC_DECIDABLE_STATUSES,
    can_transition,
    can_transition_kyc,
    is_terminal,
)
from .validation import (
    validate_business_identifier,
    validate_bank_account_details,
    missing_kyc_documents,
    normalize_currencies,
)
from .tokens import generate_verification_token, next_quota_reset

__all__ = [
    # Settings
    "LifecycleSettings",
    "lifecycle_settings",
    # Transitions
    "STATUS_TRANSITIONS",
    "KYC_TRANSITIONS",
    "KYC_DECIDABLE_STATUSES",
    "can_transition",
    "can_transition_kyc",
    "is_terminal",
    # Validation
    "validate_business_identifier",
    "validate_bank_account_details",
    "missing_kyc_documents",
    "normalize_currencies",
    # Tokens
    "generate_verification_token",
    "next_quota_reset",
]
