"""
Lifecycle Settings for the merchant onboarding engine.

This module contains the tunable parameters of the merchant lifecycle:
verification token lifetime, password hashing cost, default quota, and
the KYC document requirements.

Environment variables use the MERCHANT_ prefix:
    MERCHANT_VERIFICATION_TOKEN_EXPIRY_HOURS=24
    MERCHANT_DEFAULT_API_QUOTA_LIMIT=1000
    MERCHANT_REQUIRED_KYC_DOCUMENTS_CSV=government_id,proof_of_address

Usage:
    from src.service.lifecycle.settings import lifecycle_settings

    hours = lifecycle_settings.verification_token_expiry_hours

    # Or create custom settings for testing
    custom = LifecycleSettings(password_hash_rounds=4)
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LifecycleSettings(BaseSettings):
    """
    Configurable parameters for the merchant lifecycle.

    All settings can be overridden via environment variables with MERCHANT_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="MERCHANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Email Verification ===
    verification_token_bytes: int = Field(
        default=32,
        ge=32,
        description="Random bytes in an email verification token (hex-encoded)",
    )
    verification_token_expiry_hours: int = Field(
        default=24,
        gt=0,
        description="Hours before an email verification token expires",
    )

    # === Credentials ===
    password_hash_rounds: int = Field(
        default=10,
        ge=4,
        le=31,
        description="bcrypt work factor for merchant passwords",
    )

    # === Account Defaults ===
    default_currency: str = Field(
        default="USD",
        pattern=r"^[A-Z]{3}$",
        description="Currency assigned to newly registered merchants",
    )
    default_api_quota_limit: int = Field(
        default=1000,
        ge=0,
        description="Daily API request quota for newly registered merchants",
    )
    max_api_quota_limit: int = Field(
        default=1_000_000,
        gt=0,
        description="Upper bound an admin may set for a merchant's quota",
    )
    quota_requires_operating_status: bool = Field(
        default=False,
        description="Refuse quota consumption for inactive, suspended or closed merchants",
    )

    # === KYC ===
    required_kyc_documents_csv: str = Field(
        default="government_id,proof_of_address",
        description="Comma-separated document types every KYC submission must include",
    )
    default_kyc_rejection_reason: str = Field(
        default="Documents could not be verified",
        description="Reason sent to the merchant when an admin rejects without one",
    )

    # === Business Identifiers ===
    business_identifier_min_length: int = Field(default=5, ge=1)
    business_identifier_max_length: int = Field(default=50, ge=1)

    # === Search ===
    default_page_size: int = Field(default=20, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1)

    @field_validator("required_kyc_documents_csv")
    @classmethod
    def validate_required_documents(cls, v: str) -> str:
        """Ensure at least one required document type is configured."""
        if not [part for part in v.split(",") if part.strip()]:
            raise ValueError("At least one required KYC document type is needed")
        return v

    @property
    def required_kyc_documents(self) -> List[str]:
        """Document types every KYC submission must include, in order."""
        return [part.strip() for part in self.required_kyc_documents_csv.split(",") if part.strip()]


@lru_cache
def get_lifecycle_settings() -> LifecycleSettings:
    """Get cached lifecycle settings instance."""
    return LifecycleSettings()


lifecycle_settings = get_lifecycle_settings()
