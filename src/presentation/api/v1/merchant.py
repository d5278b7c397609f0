"""Merchant API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from src.application.dto import (
    AddressRequest,
    BankAccountRequest,
    CurrencySettingsRequest,
    KycDocumentInput,
    MerchantResponse,
    NotificationPreferencesRequest,
    RegisterMerchantRequest,
    SettlementPreferencesRequest,
    SubmitKycRequest,
    UpdateBusinessDetailsRequest,
    UpdateProfileRequest,
)
from src.application.services import MerchantService
from src.core.dependencies import get_merchant_service
from src.domain.entities import Merchant
from src.presentation.schemas import (
    AddressSchema,
    BankAccountSchema,
    CurrencySettingsSchema,
    ErrorResponseSchema,
    MerchantAnalyticsSchema,
    MerchantResponseSchema,
    MessageSchema,
    NotificationPreferencesSchema,
    QuotaStatusSchema,
    RegisterMerchantSchema,
    ResendVerificationSchema,
    SettlementPreferencesSchema,
    SubmitKycSchema,
    UpdateBusinessDetailsSchema,
    UpdateProfileSchema,
    VerifyEmailSchema,
)

merchant_router = APIRouter(
    prefix="/merchants",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        404: {"model": ErrorResponseSchema, "description": "Merchant not found"},
        409: {"model": ErrorResponseSchema, "description": "Not allowed in current state"},
    },
)

MerchantServiceDep = Annotated[MerchantService, Depends(get_merchant_service)]


def _merchant_schema(merchant: Merchant) -> MerchantResponseSchema:
    return MerchantResponseSchema.model_validate(MerchantResponse.from_entity(merchant))


# =============================================================================
# Registration
# =============================================================================

@merchant_router.post(
    "/register",
    response_model=MerchantResponseSchema,
    status_code=201,
    summary="Register Merchant",
    description="Create a merchant account and send the email verification link.",
)
async def register_merchant(
    request: RegisterMerchantSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = RegisterMerchantRequest(
        name=request.name,
        email=request.email,
        password=request.password,
        business_name=request.business_name,
        phone=request.phone,
        website=request.website,
        business_type=request.business_type,
    )
    merchant = await merchant_service.register_merchant(dto)
    return _merchant_schema(merchant)


@merchant_router.post(
    "/verify-email",
    response_model=MerchantResponseSchema,
    summary="Verify Email",
)
async def verify_email(
    request: VerifyEmailSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    merchant = await merchant_service.verify_email(request.token)
    return _merchant_schema(merchant)


@merchant_router.post(
    "/resend-verification",
    response_model=MessageSchema,
    status_code=202,
    summary="Resend Verification Email",
    description="""
    Issue a fresh verification token and email it. The previous link stops working.

    Fails with 404 for an unknown address and 409 when the email is already verified.
    """,
)
async def resend_verification(
    request: ResendVerificationSchema,
    merchant_service: MerchantServiceDep,
) -> MessageSchema:
    await merchant_service.resend_verification_email(request.email)
    return MessageSchema(message="Verification email sent")


# =============================================================================
# Profile
# =============================================================================

@merchant_router.get(
    "/{merchant_id}",
    response_model=MerchantResponseSchema,
    summary="Get Merchant",
)
async def get_merchant(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    merchant = await merchant_service.get_merchant_by_id(merchant_id)
    return _merchant_schema(merchant)


@merchant_router.patch(
    "/{merchant_id}/profile",
    response_model=MerchantResponseSchema,
    summary="Update Profile",
)
async def update_profile(
    merchant_id: UUID,
    request: UpdateProfileSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = UpdateProfileRequest(**request.model_dump(exclude_unset=True))
    merchant = await merchant_service.update_profile(merchant_id, dto)
    return _merchant_schema(merchant)


@merchant_router.put(
    "/{merchant_id}/business",
    response_model=MerchantResponseSchema,
    summary="Update Business Details",
)
async def update_business_details(
    merchant_id: UUID,
    request: UpdateBusinessDetailsSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = UpdateBusinessDetailsRequest(**request.model_dump())
    merchant = await merchant_service.update_business_details(merchant_id, dto)
    return _merchant_schema(merchant)


@merchant_router.put(
    "/{merchant_id}/address",
    response_model=MerchantResponseSchema,
    summary="Update Address",
)
async def update_address(
    merchant_id: UUID,
    request: AddressSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = AddressRequest(**request.model_dump())
    merchant = await merchant_service.update_address(merchant_id, dto)
    return _merchant_schema(merchant)


# =============================================================================
# Bank account and KYC
# =============================================================================

@merchant_router.put(
    "/{merchant_id}/bank-account",
    response_model=MerchantResponseSchema,
    summary="Set Bank Account",
    description="Store bank account details. Any previous verification is discarded.",
)
async def update_bank_account(
    merchant_id: UUID,
    request: BankAccountSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = BankAccountRequest(**request.model_dump())
    merchant = await merchant_service.update_bank_account(merchant_id, dto)
    return _merchant_schema(merchant)


@merchant_router.post(
    "/{merchant_id}/bank-account/verify",
    response_model=MerchantResponseSchema,
    summary="Verify Bank Account",
    responses={
        422: {"model": ErrorResponseSchema, "description": "Bank account rejected"},
    },
)
async def verify_bank_account(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    merchant = await merchant_service.verify_bank_account(merchant_id)
    return _merchant_schema(merchant)


@merchant_router.post(
    "/{merchant_id}/kyc",
    response_model=MerchantResponseSchema,
    summary="Submit KYC Documents",
)
async def submit_kyc(
    merchant_id: UUID,
    request: SubmitKycSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = SubmitKycRequest(
        documents=[
            KycDocumentInput(type=d.type, file_name=d.file_name, file_url=d.file_url)
            for d in request.documents
        ]
    )
    merchant = await merchant_service.submit_kyc_documents(merchant_id, dto)
    return _merchant_schema(merchant)


# =============================================================================
# Preferences
# =============================================================================

@merchant_router.put(
    "/{merchant_id}/settlement-preferences",
    response_model=MerchantResponseSchema,
    summary="Update Settlement Preferences",
)
async def update_settlement_preferences(
    merchant_id: UUID,
    request: SettlementPreferencesSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = SettlementPreferencesRequest(**request.model_dump())
    merchant = await merchant_service.update_settlement_preferences(merchant_id, dto)
    return _merchant_schema(merchant)


@merchant_router.patch(
    "/{merchant_id}/notification-preferences",
    response_model=MerchantResponseSchema,
    summary="Update Notification Preferences",
)
async def update_notification_preferences(
    merchant_id: UUID,
    request: NotificationPreferencesSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = NotificationPreferencesRequest(
        changes=request.model_dump(exclude_unset=True, exclude_none=True)
    )
    merchant = await merchant_service.update_notification_preferences(merchant_id, dto)
    return _merchant_schema(merchant)


@merchant_router.put(
    "/{merchant_id}/currency-settings",
    response_model=MerchantResponseSchema,
    summary="Update Currency Settings",
)
async def update_currency_settings(
    merchant_id: UUID,
    request: CurrencySettingsSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = CurrencySettingsRequest(
        supported_currencies=request.supported_currencies,
        default_currency=request.default_currency,
    )
    merchant = await merchant_service.update_currency_settings(merchant_id, dto)
    return _merchant_schema(merchant)


# =============================================================================
# Usage
# =============================================================================

@merchant_router.get(
    "/{merchant_id}/analytics",
    response_model=MerchantAnalyticsSchema,
    summary="Get Merchant Analytics",
)
async def get_merchant_analytics(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
) -> MerchantAnalyticsSchema:
    analytics = await merchant_service.get_merchant_analytics(merchant_id)
    return MerchantAnalyticsSchema.model_validate(analytics)


@merchant_router.post(
    "/{merchant_id}/quota/consume",
    response_model=QuotaStatusSchema,
    summary="Consume API Quota",
    description="Count one API call against the merchant's quota for the current window.",
    responses={
        429: {"model": ErrorResponseSchema, "description": "API quota exceeded"},
    },
)
async def consume_api_quota(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
) -> QuotaStatusSchema:
    merchant = await merchant_service.check_and_increment_api_quota(merchant_id)
    response = MerchantResponse.from_entity(merchant)
    return QuotaStatusSchema(
        api_quota_used=merchant.api_quota_used,
        api_quota_limit=merchant.api_quota_limit,
        api_quota_remaining=max(merchant.api_quota_limit - merchant.api_quota_used, 0),
        api_quota_reset_at=response.api_quota_reset_at,
    )
