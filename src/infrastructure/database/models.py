"""SQLAlchemy ORM models for merchant and admin entities."""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.clock import utc_now


class Base(DeclarativeBase):
    pass


class MerchantModel(Base):
    """Persisted merchant account."""

    __tablename__ = "merchants"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    business_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    business_registration_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    business_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    address_line1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(2), nullable=True, index=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending",
        index=True,
    )

    kyc_status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="not_started",
        index=True,
    )
    kyc_submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    kyc_verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    kyc_rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    kyc_documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verification_token: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    email_verification_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    email_verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    bank_account_number: Mapped[str | None] = mapped_column(String(34), nullable=True)
    bank_routing_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bank_account_holder_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_swift_code: Mapped[str | None] = mapped_column(String(11), nullable=True)
    bank_iban: Mapped[str | None] = mapped_column(String(34), nullable=True)
    bank_account_status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="not_verified",
    )
    bank_verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    supported_currencies: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    default_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    settlement_frequency: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="daily",
    )
    minimum_settlement_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0"),
    )
    auto_settlement_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    notification_preferences: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    api_quota_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    api_quota_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    api_quota_reset_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    suspension_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    closed_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
    )


class AdminUserModel(Base):
    """Persisted platform user that may hold an admin role."""

    __tablename__ = "admin_users"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
    )


class AdminSessionModel(Base):
    """Persisted admin refresh-token session."""

    __tablename__ = "admin_sessions"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
    )


class AdminLoginAttemptModel(Base):
    """Append-only record of an admin login attempt."""

    __tablename__ = "admin_login_attempts"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
        index=True,
    )
