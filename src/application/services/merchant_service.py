"""Merchant service - orchestrates the merchant lifecycle use cases."""

from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import UUID

import structlog

from src.application.dto import (
    AddressRequest,
    BankAccountRequest,
    ChangeStatusRequest,
    CurrencySettingsRequest,
    MerchantAnalyticsResponse,
    NotificationPreferencesRequest,
    PaginatedMerchantsResponse,
    RegisterMerchantRequest,
    SearchMerchantsRequest,
    SettlementPreferencesRequest,
    SubmitKycRequest,
    UpdateApiQuotaRequest,
    UpdateBusinessDetailsRequest,
    UpdateProfileRequest,
    VerifyKycRequest,
)
from src.core.clock import utc_now
from src.core.metrics import (
    record_email_failure,
    record_email_verification,
    record_kyc_decision,
    record_quota_rejection,
    record_registration,
    record_status_transition,
)
from src.core.security import PasswordHasher
from src.domain.entities import (
    SORTABLE_FIELDS,
    BankAccountStatus,
    KycDocument,
    KycDocumentStatus,
    KycStatus,
    Merchant,
    MerchantSearchCriteria,
    MerchantStatistics,
    MerchantStatus,
    NotificationPreferences,
    SettlementFrequency,
)
from src.domain.exceptions import (
    ApiQuotaExceededException,
    BankAccountAlreadyVerifiedException,
    BankAccountNotFoundException,
    BankAccountVerificationFailedException,
    KycAlreadyApprovedException,
    KycAlreadySubmittedException,
    KycDocumentRequiredException,
    KycInvalidStatusException,
    MerchantAlreadyExistsException,
    MerchantClosedException,
    MerchantInactiveException,
    MerchantEmailAlreadyVerifiedException,
    MerchantEmailNotVerifiedException,
    MerchantInvalidStatusException,
    MerchantNotFoundException,
    MerchantSuspendedException,
    ValidationFailedException,
    VerificationTokenExpiredException,
    VerificationTokenInvalidException,
)
from src.domain.interfaces import (
    BankVerificationProvider,
    EmailSender,
    MerchantRepository,
)
from src.service.lifecycle import (
    KYC_DECIDABLE_STATUSES,
    LifecycleSettings,
    can_transition,
    can_transition_kyc,
    generate_verification_token,
    lifecycle_settings,
    missing_kyc_documents,
    next_quota_reset,
    normalize_currencies,
    validate_bank_account_details,
    validate_business_identifier,
)

logger = structlog.get_logger(__name__)


class MerchantService:
    """
    Application service for the merchant lifecycle.

    Covers onboarding (registration, email verification, KYC, bank
    account), account preferences, admin status changes and API quota
    accounting. Notification emails are best-effort: a failed send is
    logged and counted but never fails the operation that triggered it.
    """

    def __init__(
        self,
        merchant_repository: MerchantRepository,
        email_sender: EmailSender,
        bank_verifier: BankVerificationProvider,
        password_hasher: Optional[PasswordHasher] = None,
        settings: LifecycleSettings = lifecycle_settings,
    ):
        self._merchant_repo = merchant_repository
        self._email_sender = email_sender
        self._bank_verifier = bank_verifier
        self._settings = settings
        self._password_hasher = password_hasher or PasswordHasher(
            rounds=settings.password_hash_rounds
        )

    # =========================================================================
    # Registration and email verification
    # =========================================================================

    async def register_merchant(self, request: RegisterMerchantRequest) -> Merchant:
        """
        Register a new merchant and send the email verification link.

        Args:
            request: Registration details

        Returns:
            The newly created merchant, in PENDING status

        Raises:
            ValidationFailedException: If the request is malformed
            MerchantAlreadyExistsException: If the email is already registered
        """
        errors = request.validate()
        if errors:
            raise ValidationFailedException(field="request", message="; ".join(errors))

        email = request.email.strip().lower()
        log = logger.bind(email=email)

        if await self._merchant_repo.find_by_email(email) is not None:
            log.info("merchant_registration_rejected", reason="email_exists")
            raise MerchantAlreadyExistsException(email)

        now = utc_now()
        token, expires_at = generate_verification_token(now, self._settings)
        default_currency = self._settings.default_currency

        merchant = Merchant(
            name=request.name.strip(),
            email=email,
            password_hash=self._password_hasher.hash(request.password),
            business_name=request.business_name,
            phone=request.phone,
            website=request.website,
            business_type=request.business_type,
            status=MerchantStatus.PENDING,
            kyc_status=KycStatus.NOT_STARTED,
            bank_account_status=BankAccountStatus.NOT_VERIFIED,
            email_verified=False,
            email_verification_token=token,
            email_verification_expires_at=expires_at,
            supported_currencies=[default_currency],
            default_currency=default_currency,
            settlement_frequency=SettlementFrequency.DAILY,
            notification_preferences=NotificationPreferences(),
            api_quota_limit=self._settings.default_api_quota_limit,
            api_quota_used=0,
            api_quota_reset_at=next_quota_reset(now),
            created_at=now,
            updated_at=now,
        )

        merchant = await self._merchant_repo.create(merchant)
        record_registration()
        log.info("merchant_registered", merchant_id=str(merchant.id))

        await self._notify(
            "verification",
            merchant,
            self._email_sender.send_verification_email,
            merchant.email,
            token,
            merchant.name,
        )

        return merchant

    async def verify_email(self, token: str) -> Merchant:
        """
        Confirm a merchant's email address with a verification token.

        Raises:
            VerificationTokenInvalidException: If no merchant holds the token
            MerchantEmailAlreadyVerifiedException: If the email is already verified
            VerificationTokenExpiredException: If the token is past its expiry
        """
        merchant = await self._merchant_repo.find_by_verification_token(token)
        if merchant is None:
            raise VerificationTokenInvalidException()

        if merchant.email_verified:
            raise MerchantEmailAlreadyVerifiedException()

        now = utc_now()
        if merchant.verification_token_expired(now):
            raise VerificationTokenExpiredException()

        updated = await self._merchant_repo.update(
            merchant.id,
            {
                "email_verified": True,
                "email_verified_at": now,
                "email_verification_token": None,
                "email_verification_expires_at": None,
            },
        )
        record_email_verification()
        logger.info("merchant_email_verified", merchant_id=str(merchant.id))

        await self._notify(
            "welcome",
            merchant,
            self._email_sender.send_welcome_email,
            merchant.email,
            merchant.name,
        )

        return updated

    async def resend_verification_email(self, email: str) -> None:
        """
        Issue a fresh verification token and email it again.

        The previous token stops working.

        Raises:
            MerchantNotFoundException: If no merchant has this email
            MerchantEmailAlreadyVerifiedException: If the email is already verified
        """
        merchant = await self.get_merchant_by_email(email)

        if merchant.email_verified:
            raise MerchantEmailAlreadyVerifiedException()

        token, expires_at = generate_verification_token(settings=self._settings)
        await self._merchant_repo.update(
            merchant.id,
            {
                "email_verification_token": token,
                "email_verification_expires_at": expires_at,
            },
        )
        logger.info("verification_email_reissued", merchant_id=str(merchant.id))

        await self._notify(
            "verification",
            merchant,
            self._email_sender.send_verification_email,
            merchant.email,
            token,
            merchant.name,
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    async def get_merchant_by_id(self, merchant_id: UUID) -> Merchant:
        """
        Get a merchant by ID.

        Raises:
            MerchantNotFoundException: If the merchant does not exist
        """
        merchant = await self._merchant_repo.find_by_id(merchant_id)
        if merchant is None:
            raise MerchantNotFoundException(str(merchant_id))
        return merchant

    async def get_merchant_by_email(self, email: str) -> Merchant:
        merchant = await self._merchant_repo.find_by_email(email.strip().lower())
        if merchant is None:
            raise MerchantNotFoundException()
        return merchant

    # =========================================================================
    # Profile, business details and address
    # =========================================================================

    async def update_profile(
        self,
        merchant_id: UUID,
        request: UpdateProfileRequest,
    ) -> Merchant:
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        fields = _supplied_fields(
            name=request.name,
            business_name=request.business_name,
            phone=request.phone,
            website=request.website,
            business_type=request.business_type,
            business_description=request.business_description,
            business_category=request.business_category,
        )
        if not fields:
            return merchant

        updated = await self._merchant_repo.update(merchant.id, fields)
        logger.info(
            "merchant_profile_updated",
            merchant_id=str(merchant.id),
            fields=sorted(fields),
        )
        return updated

    async def update_business_details(
        self,
        merchant_id: UUID,
        request: UpdateBusinessDetailsRequest,
    ) -> Merchant:
        """
        Replace the merchant's business details.

        Raises:
            MerchantSuspendedException: If the merchant is suspended
            MerchantClosedException: If the merchant is closed
            ValidationFailedException: If the registration number or tax ID
                has an invalid length
        """
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        if request.business_registration_number:
            validate_business_identifier(
                "business_registration_number",
                request.business_registration_number,
                "business registration number",
                self._settings,
            )
        if request.tax_id:
            validate_business_identifier("tax_id", request.tax_id, "tax ID", self._settings)

        fields = _supplied_fields(
            business_name=request.business_name,
            business_type=request.business_type,
            business_registration_number=request.business_registration_number,
            tax_id=request.tax_id,
            business_description=request.business_description,
            business_category=request.business_category,
        )
        updated = await self._merchant_repo.update(merchant.id, fields)
        logger.info("merchant_business_details_updated", merchant_id=str(merchant.id))
        return updated

    async def update_address(self, merchant_id: UUID, request: AddressRequest) -> Merchant:
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        updated = await self._merchant_repo.update(
            merchant.id,
            {
                "address_line1": request.address_line1,
                "address_line2": request.address_line2,
                "city": request.city,
                "state": request.state,
                "postal_code": request.postal_code,
                "country": request.country.upper(),
            },
        )
        logger.info("merchant_address_updated", merchant_id=str(merchant.id))
        return updated

    # =========================================================================
    # KYC
    # =========================================================================

    async def submit_kyc_documents(
        self,
        merchant_id: UUID,
        request: SubmitKycRequest,
    ) -> Merchant:
        """
        Submit KYC documents for review.

        Resubmission is allowed while the previous submission is still
        pending, after a rejection, and after an approval has expired.

        Raises:
            MerchantEmailNotVerifiedException: If the email is not verified
            KycAlreadyApprovedException: If KYC is already approved
            KycAlreadySubmittedException: If a review is in progress
            KycDocumentRequiredException: If required document types are missing
        """
        merchant = await self.get_merchant_by_id(merchant_id)

        if not merchant.email_verified:
            raise MerchantEmailNotVerifiedException()

        if merchant.kyc_status == KycStatus.APPROVED:
            raise KycAlreadyApprovedException()

        if merchant.kyc_status == KycStatus.IN_REVIEW:
            raise KycAlreadySubmittedException()

        missing = missing_kyc_documents(
            (doc.type for doc in request.documents), self._settings
        )
        if missing:
            raise KycDocumentRequiredException(missing)

        if not can_transition_kyc(merchant.kyc_status, KycStatus.PENDING):
            raise KycInvalidStatusException(
                merchant.kyc_status.value, KycStatus.PENDING.value
            )

        now = utc_now()
        documents = [
            KycDocument(
                type=doc.type,
                file_name=doc.file_name,
                file_url=doc.file_url,
                uploaded_at=now,
                status=KycDocumentStatus.PENDING,
            )
            for doc in request.documents
        ]

        updated = await self._merchant_repo.update_kyc_status(
            merchant.id,
            KycStatus.PENDING,
            {
                "kyc_documents": documents,
                "kyc_submitted_at": now,
                "kyc_rejection_reason": None,
            },
            expected=merchant.kyc_status,
        )
        if updated is None:
            await self._raise_kyc_conflict(merchant.id, KycStatus.PENDING.value)
        logger.info(
            "kyc_submitted",
            merchant_id=str(merchant.id),
            document_count=len(documents),
        )

        await self._notify(
            "kyc_submitted",
            merchant,
            self._email_sender.send_kyc_submitted_email,
            merchant.email,
            merchant.name,
        )

        return updated

    async def start_kyc_review(self, merchant_id: UUID) -> Merchant:
        """
        Mark a pending KYC submission as under review (admin action).

        Raises:
            KycInvalidStatusException: If KYC is not PENDING
        """
        merchant = await self.get_merchant_by_id(merchant_id)

        if merchant.kyc_status != KycStatus.PENDING or not can_transition_kyc(
            merchant.kyc_status, KycStatus.IN_REVIEW
        ):
            raise KycInvalidStatusException(
                merchant.kyc_status.value, KycStatus.IN_REVIEW.value
            )

        updated = await self._merchant_repo.update_kyc_status(
            merchant.id, KycStatus.IN_REVIEW, expected=KycStatus.PENDING
        )
        if updated is None:
            await self._raise_kyc_conflict(merchant.id, KycStatus.IN_REVIEW.value)
        logger.info("kyc_review_started", merchant_id=str(merchant.id))
        return updated

    async def verify_kyc(self, merchant_id: UUID, request: VerifyKycRequest) -> Merchant:
        """
        Record an admin's KYC decision.

        Approval of a merchant whose email is verified and whose account is
        still PENDING also activates the account.

        Raises:
            KycInvalidStatusException: If KYC is not PENDING or IN_REVIEW
        """
        merchant = await self.get_merchant_by_id(merchant_id)

        target = KycStatus.APPROVED if request.approved else KycStatus.REJECTED
        if merchant.kyc_status not in KYC_DECIDABLE_STATUSES or not can_transition_kyc(
            merchant.kyc_status, target
        ):
            raise KycInvalidStatusException(merchant.kyc_status.value, request.decision)

        log = logger.bind(merchant_id=str(merchant.id), decision=request.decision)
        now = utc_now()

        if request.approved:
            documents = [
                replace(doc, status=KycDocumentStatus.APPROVED, rejection_reason=None)
                for doc in merchant.kyc_documents
            ]
            updated = await self._merchant_repo.update_kyc_status(
                merchant.id,
                KycStatus.APPROVED,
                {
                    "kyc_verified_at": now,
                    "kyc_rejection_reason": None,
                    "kyc_documents": documents,
                },
                expected=merchant.kyc_status,
            )
            if updated is None:
                await self._raise_kyc_conflict(merchant.id, request.decision)

            if merchant.email_verified and merchant.status == MerchantStatus.PENDING:
                # Skipped when an admin changed the account status meanwhile
                activated = await self._merchant_repo.update_status(
                    merchant.id, MerchantStatus.ACTIVE, expected=MerchantStatus.PENDING
                )
                if activated is not None:
                    updated = activated
                    record_status_transition(
                        MerchantStatus.PENDING.value, MerchantStatus.ACTIVE.value
                    )
                    log.info("merchant_activated_by_kyc")
            record_kyc_decision(approved=True)
            log.info("kyc_decided")

            await self._notify(
                "kyc_approved",
                merchant,
                self._email_sender.send_kyc_approved_email,
                merchant.email,
                merchant.name,
            )
            return updated

        reason = request.rejection_reason
        documents = [
            replace(doc, status=KycDocumentStatus.REJECTED, rejection_reason=reason)
            for doc in merchant.kyc_documents
        ]
        updated = await self._merchant_repo.update_kyc_status(
            merchant.id,
            KycStatus.REJECTED,
            {
                "kyc_rejection_reason": reason,
                "kyc_documents": documents,
            },
            expected=merchant.kyc_status,
        )
        if updated is None:
            await self._raise_kyc_conflict(merchant.id, request.decision)
        record_kyc_decision(approved=False)
        log.info("kyc_decided", rejection_reason=reason)

        await self._notify(
            "kyc_rejected",
            merchant,
            self._email_sender.send_kyc_rejected_email,
            merchant.email,
            merchant.name,
            reason or self._settings.default_kyc_rejection_reason,
        )
        return updated

    # =========================================================================
    # Bank account
    # =========================================================================

    async def update_bank_account(
        self,
        merchant_id: UUID,
        request: BankAccountRequest,
    ) -> Merchant:
        """
        Store new bank account details, pending verification.

        Raises:
            MerchantSuspendedException: If the merchant is suspended
            MerchantClosedException: If the merchant is closed
            BankAccountInvalidException: If any field has an invalid format
        """
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        validate_bank_account_details(
            request.account_number,
            routing_number=request.routing_number,
            swift_code=request.swift_code,
            iban=request.iban,
        )

        updated = await self._merchant_repo.update(
            merchant.id,
            {
                "bank_account_number": request.account_number,
                "bank_routing_number": request.routing_number,
                "bank_account_holder_name": request.account_holder_name,
                "bank_name": request.bank_name,
                "bank_swift_code": request.swift_code,
                "bank_iban": request.iban,
                "bank_account_status": BankAccountStatus.PENDING,
                "bank_verified_at": None,
            },
        )
        logger.info("bank_account_updated", merchant_id=str(merchant.id))
        return updated

    async def verify_bank_account(self, merchant_id: UUID) -> Merchant:
        """
        Verify the stored bank account with the verification provider.

        A rejected account is left in FAILED status before the error is
        raised.

        Raises:
            BankAccountNotFoundException: If account or routing number is missing
            BankAccountAlreadyVerifiedException: If already verified
            BankAccountVerificationFailedException: If the provider rejects it
        """
        merchant = await self.get_merchant_by_id(merchant_id)

        if not merchant.bank_account_number or not merchant.bank_routing_number:
            raise BankAccountNotFoundException()

        if merchant.bank_account_status == BankAccountStatus.VERIFIED:
            raise BankAccountAlreadyVerifiedException()

        log = logger.bind(merchant_id=str(merchant.id))

        result = await self._bank_verifier.verify_bank_account(
            merchant.bank_account_number,
            merchant.bank_routing_number,
            merchant.bank_account_holder_name or "",
        )

        if not result.success:
            await self._merchant_repo.update_bank_account_status(
                merchant.id, BankAccountStatus.FAILED
            )
            log.warning("bank_account_verification_failed", error=result.error)
            raise BankAccountVerificationFailedException(result.error)

        updated = await self._merchant_repo.update_bank_account_status(
            merchant.id, BankAccountStatus.VERIFIED
        )
        log.info("bank_account_verified")

        await self._notify(
            "bank_account_verified",
            merchant,
            self._email_sender.send_bank_account_verified_email,
            merchant.email,
            merchant.name,
        )
        return updated

    # =========================================================================
    # Preferences
    # =========================================================================

    async def update_settlement_preferences(
        self,
        merchant_id: UUID,
        request: SettlementPreferencesRequest,
    ) -> Merchant:
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        if (
            request.minimum_settlement_amount is not None
            and request.minimum_settlement_amount < 0
        ):
            raise ValidationFailedException(
                field="minimum_settlement_amount",
                message="Minimum settlement amount cannot be negative",
            )

        fields = _supplied_fields(
            settlement_frequency=request.settlement_frequency,
            minimum_settlement_amount=request.minimum_settlement_amount,
            auto_settlement_enabled=request.auto_settlement_enabled,
        )
        if not fields:
            return merchant

        updated = await self._merchant_repo.update(merchant.id, fields)
        logger.info("settlement_preferences_updated", merchant_id=str(merchant.id))
        return updated

    async def update_notification_preferences(
        self,
        merchant_id: UUID,
        request: NotificationPreferencesRequest,
    ) -> Merchant:
        """Merge preference changes over the current ones; allowed in any status."""
        merchant = await self.get_merchant_by_id(merchant_id)

        current = merchant.notification_preferences or NotificationPreferences()
        updated = await self._merchant_repo.update(
            merchant.id,
            {"notification_preferences": current.merge(request.changes)},
        )
        logger.info("notification_preferences_updated", merchant_id=str(merchant.id))
        return updated

    async def update_currency_settings(
        self,
        merchant_id: UUID,
        request: CurrencySettingsRequest,
    ) -> Merchant:
        """
        Set supported currencies and the default currency.

        The default currency is added to the supported list when missing.
        """
        merchant = await self.get_merchant_by_id(merchant_id)
        self._ensure_modifiable(merchant)

        default = request.default_currency.upper()
        supported = normalize_currencies(
            (code.upper() for code in request.supported_currencies), default
        )

        updated = await self._merchant_repo.update(
            merchant.id,
            {"supported_currencies": supported, "default_currency": default},
        )
        logger.info(
            "currency_settings_updated",
            merchant_id=str(merchant.id),
            default_currency=default,
            supported=supported,
        )
        return updated

    # =========================================================================
    # Account status (admin)
    # =========================================================================

    async def change_merchant_status(
        self,
        merchant_id: UUID,
        request: ChangeStatusRequest,
    ) -> Merchant:
        """
        Move a merchant to a new account status.

        Raises:
            MerchantInvalidStatusException: If the transition is not allowed
        """
        merchant = await self.get_merchant_by_id(merchant_id)
        current = merchant.status
        requested = request.status

        if not can_transition(current, requested):
            raise MerchantInvalidStatusException(current.value, requested.value)

        fields: Dict[str, Any] = {}
        if requested == MerchantStatus.SUSPENDED:
            fields["suspension_reason"] = request.reason
        elif requested == MerchantStatus.CLOSED:
            fields["closed_at"] = utc_now()
            fields["closed_reason"] = request.reason
        if current == MerchantStatus.SUSPENDED and requested != MerchantStatus.CLOSED:
            fields["suspension_reason"] = None

        updated = await self._merchant_repo.update_status(
            merchant.id, requested, fields, expected=current
        )
        if updated is None:
            latest = await self.get_merchant_by_id(merchant.id)
            raise MerchantInvalidStatusException(latest.status.value, requested.value)
        record_status_transition(current.value, requested.value)
        logger.info(
            "merchant_status_changed",
            merchant_id=str(merchant.id),
            from_status=current.value,
            to_status=requested.value,
            reason=request.reason,
        )

        if requested == MerchantStatus.SUSPENDED:
            await self._notify(
                "account_suspended",
                merchant,
                self._email_sender.send_account_suspended_email,
                merchant.email,
                merchant.name,
                request.reason,
            )
        elif requested == MerchantStatus.ACTIVE and current == MerchantStatus.SUSPENDED:
            await self._notify(
                "account_reactivated",
                merchant,
                self._email_sender.send_account_reactivated_email,
                merchant.email,
                merchant.name,
            )

        return updated

    async def activate_merchant(self, merchant_id: UUID) -> Merchant:
        return await self.change_merchant_status(
            merchant_id, ChangeStatusRequest(status=MerchantStatus.ACTIVE)
        )

    async def suspend_merchant(
        self,
        merchant_id: UUID,
        reason: Optional[str] = None,
    ) -> Merchant:
        return await self.change_merchant_status(
            merchant_id, ChangeStatusRequest(status=MerchantStatus.SUSPENDED, reason=reason)
        )

    async def close_merchant_account(
        self,
        merchant_id: UUID,
        reason: Optional[str] = None,
    ) -> Merchant:
        return await self.change_merchant_status(
            merchant_id, ChangeStatusRequest(status=MerchantStatus.CLOSED, reason=reason)
        )

    # =========================================================================
    # API quota
    # =========================================================================

    async def check_and_increment_api_quota(self, merchant_id: UUID) -> Merchant:
        """
        Consume one unit of the merchant's API quota.

        The store applies the increment conditionally, so concurrent callers
        never push usage past the limit.

        Returns:
            The merchant with its updated usage

        Raises:
            ApiQuotaExceededException: If the quota for the window is used up
            MerchantInactiveException, MerchantSuspendedException,
            MerchantClosedException: When status gating is switched on and
                the merchant is not operating
        """
        merchant = await self.get_merchant_by_id(merchant_id)
        if self._settings.quota_requires_operating_status:
            self._ensure_operational(merchant)

        if merchant.api_quota_used >= merchant.api_quota_limit:
            record_quota_rejection()
            raise ApiQuotaExceededException(
                merchant.api_quota_limit, merchant.api_quota_reset_at
            )

        if not await self._merchant_repo.increment_api_quota(merchant.id):
            record_quota_rejection()
            logger.info("api_quota_increment_lost", merchant_id=str(merchant.id))
            raise ApiQuotaExceededException(
                merchant.api_quota_limit, merchant.api_quota_reset_at
            )

        return await self.get_merchant_by_id(merchant_id)

    async def update_api_quota(
        self,
        merchant_id: UUID,
        request: UpdateApiQuotaRequest,
    ) -> Merchant:
        """Set a merchant's API quota limit (admin action)."""
        merchant = await self.get_merchant_by_id(merchant_id)

        limit = request.api_quota_limit
        if not 0 <= limit <= self._settings.max_api_quota_limit:
            raise ValidationFailedException(
                field="api_quota_limit",
                message=(
                    "API quota limit must be between 0 and "
                    f"{self._settings.max_api_quota_limit}"
                ),
            )

        updated = await self._merchant_repo.update(merchant.id, {"api_quota_limit": limit})
        logger.info(
            "api_quota_limit_updated",
            merchant_id=str(merchant.id),
            previous_limit=merchant.api_quota_limit,
            api_quota_limit=limit,
        )
        return updated

    async def reset_api_quotas(self) -> int:
        """Start a new quota window for every merchant. Safe to run repeatedly."""
        next_reset_at = next_quota_reset()
        count = await self._merchant_repo.reset_api_quotas(next_reset_at)
        logger.info(
            "api_quotas_reset",
            merchant_count=count,
            next_reset_at=next_reset_at.isoformat(),
        )
        return count

    async def cleanup_expired_tokens(self) -> int:
        """Drop verification tokens that expired before being used."""
        expired = await self._merchant_repo.find_expired_verification_tokens(utc_now())

        for merchant in expired:
            await self._merchant_repo.update(
                merchant.id,
                {
                    "email_verification_token": None,
                    "email_verification_expires_at": None,
                },
            )

        logger.info("expired_verification_tokens_cleaned", count=len(expired))
        return len(expired)

    # =========================================================================
    # Search and reporting (admin)
    # =========================================================================

    async def search_merchants(
        self,
        request: SearchMerchantsRequest,
    ) -> PaginatedMerchantsResponse:
        criteria = self._build_criteria(request)
        merchants, total = await self._merchant_repo.search(criteria)
        return PaginatedMerchantsResponse.from_entities(
            merchants, total=total, page=criteria.page, limit=criteria.limit
        )

    async def get_merchant_analytics(self, merchant_id: UUID) -> MerchantAnalyticsResponse:
        merchant = await self.get_merchant_by_id(merchant_id)
        return MerchantAnalyticsResponse.from_entity(merchant)

    async def get_merchant_statistics(self) -> MerchantStatistics:
        return await self._merchant_repo.get_statistics()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_criteria(self, request: SearchMerchantsRequest) -> MerchantSearchCriteria:
        """Clamp paging and fall back to default ordering for unknown fields."""
        page = max(request.page or 1, 1)
        limit = request.limit or self._settings.default_page_size
        limit = min(max(limit, 1), self._settings.max_page_size)

        sort_by = request.sort_by if request.sort_by in SORTABLE_FIELDS else "created_at"
        sort_order = (request.sort_order or "DESC").upper()
        if sort_order not in ("ASC", "DESC"):
            sort_order = "DESC"

        return MerchantSearchCriteria(
            search=request.search.strip() if request.search else None,
            status=request.status,
            kyc_status=request.kyc_status,
            business_type=request.business_type,
            country=request.country.upper() if request.country else None,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    @staticmethod
    def _ensure_modifiable(merchant: Merchant) -> None:
        if merchant.status == MerchantStatus.SUSPENDED:
            raise MerchantSuspendedException(merchant.suspension_reason)
        if merchant.status == MerchantStatus.CLOSED:
            raise MerchantClosedException()

    async def _raise_kyc_conflict(self, merchant_id: UUID, requested: str) -> None:
        """Report a KYC write that lost to a concurrent change."""
        latest = await self.get_merchant_by_id(merchant_id)
        raise KycInvalidStatusException(latest.kyc_status.value, requested)

    @classmethod
    def _ensure_operational(cls, merchant: Merchant) -> None:
        cls._ensure_modifiable(merchant)
        if merchant.status == MerchantStatus.INACTIVE:
            raise MerchantInactiveException()

    async def _notify(
        self,
        kind: str,
        merchant: Merchant,
        send: Callable[..., Awaitable[None]],
        *args: Any,
    ) -> None:
        """Send a notification email without letting delivery failures escape."""
        try:
            await send(*args)
        except Exception as e:
            record_email_failure(kind)
            logger.error(
                "email_send_failed",
                kind=kind,
                merchant_id=str(merchant.id),
                error=str(e),
            )


def _supplied_fields(**values: Any) -> Dict[str, Any]:
    """Keep only the fields the caller actually supplied."""
    return {key: value for key, value in values.items() if value is not None}
