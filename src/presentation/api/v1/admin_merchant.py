"""Admin merchant management endpoints. Every route requires an admin access token."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
import structlog

from src.application.dto import (
    ChangeStatusRequest,
    MerchantResponse,
    SearchMerchantsRequest,
    UpdateApiQuotaRequest,
    VerifyKycRequest,
)
from src.application.services import MerchantService
from src.core.dependencies import get_current_admin, get_merchant_service
from src.domain.entities import AdminPrincipal, Merchant
from src.presentation.schemas import (
    ChangeStatusSchema,
    ErrorResponseSchema,
    MerchantResponseSchema,
    MerchantSearchParams,
    MerchantStatisticsSchema,
    PaginatedMerchantsSchema,
    StatusReasonSchema,
    UpdateApiQuotaSchema,
    VerifyKycSchema,
)

logger = structlog.get_logger(__name__)

admin_merchant_router = APIRouter(
    prefix="/admin/merchants",
    dependencies=[Depends(get_current_admin)],
    responses={
        401: {"model": ErrorResponseSchema, "description": "Missing or invalid token"},
        404: {"model": ErrorResponseSchema, "description": "Merchant not found"},
        409: {"model": ErrorResponseSchema, "description": "Not allowed in current state"},
    },
)

MerchantServiceDep = Annotated[MerchantService, Depends(get_merchant_service)]
CurrentAdmin = Annotated[AdminPrincipal, Depends(get_current_admin)]


def _merchant_schema(merchant: Merchant) -> MerchantResponseSchema:
    return MerchantResponseSchema.model_validate(MerchantResponse.from_entity(merchant))


@admin_merchant_router.get(
    "",
    response_model=PaginatedMerchantsSchema,
    summary="Search Merchants",
    description="""
    Search merchants by free text and filters.

    `search` matches name, business name and email case-insensitively.
    Results are paginated; `limit` is capped at 100.
    """,
)
async def search_merchants(
    params: Annotated[MerchantSearchParams, Query()],
    merchant_service: MerchantServiceDep,
) -> PaginatedMerchantsSchema:
    dto = SearchMerchantsRequest(
        search=params.search,
        status=params.status,
        kyc_status=params.kyc_status,
        business_type=params.business_type,
        country=params.country,
        page=params.page,
        limit=params.limit,
        sort_by=params.sort_by,
        sort_order=params.sort_order,
    )
    result = await merchant_service.search_merchants(dto)
    return PaginatedMerchantsSchema.model_validate(result)


@admin_merchant_router.get(
    "/statistics",
    response_model=MerchantStatisticsSchema,
    summary="Merchant Statistics",
)
async def get_merchant_statistics(
    merchant_service: MerchantServiceDep,
) -> MerchantStatisticsSchema:
    stats = await merchant_service.get_merchant_statistics()
    return MerchantStatisticsSchema.model_validate(stats)


# =============================================================================
# KYC review
# =============================================================================

@admin_merchant_router.post(
    "/{merchant_id}/kyc/review",
    response_model=MerchantResponseSchema,
    summary="Start KYC Review",
)
async def start_kyc_review(
    merchant_id: UUID,
    admin: CurrentAdmin,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    merchant = await merchant_service.start_kyc_review(merchant_id)
    logger.info("admin_kyc_review_started", admin_id=str(admin.id), merchant_id=str(merchant_id))
    return _merchant_schema(merchant)


@admin_merchant_router.post(
    "/{merchant_id}/kyc/verify",
    response_model=MerchantResponseSchema,
    summary="Approve or Reject KYC",
    description="""
    Record the KYC decision.

    Approving a merchant whose email is verified and whose account is
    pending also activates the account.
    """,
)
async def verify_kyc(
    merchant_id: UUID,
    request: VerifyKycSchema,
    admin: CurrentAdmin,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = VerifyKycRequest(
        decision=request.decision,
        rejection_reason=request.rejection_reason,
    )
    merchant = await merchant_service.verify_kyc(merchant_id, dto)
    logger.info(
        "admin_kyc_decision",
        admin_id=str(admin.id),
        merchant_id=str(merchant_id),
        decision=request.decision,
    )
    return _merchant_schema(merchant)


# =============================================================================
# Account status
# =============================================================================

@admin_merchant_router.post(
    "/{merchant_id}/status",
    response_model=MerchantResponseSchema,
    summary="Change Merchant Status",
)
async def change_status(
    merchant_id: UUID,
    request: ChangeStatusSchema,
    admin: CurrentAdmin,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = ChangeStatusRequest(status=request.status, reason=request.reason)
    merchant = await merchant_service.change_merchant_status(merchant_id, dto)
    logger.info(
        "admin_status_changed",
        admin_id=str(admin.id),
        merchant_id=str(merchant_id),
        status=request.status.value,
    )
    return _merchant_schema(merchant)


@admin_merchant_router.post(
    "/{merchant_id}/activate",
    response_model=MerchantResponseSchema,
    summary="Activate Merchant",
)
async def activate_merchant(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    merchant = await merchant_service.activate_merchant(merchant_id)
    return _merchant_schema(merchant)


@admin_merchant_router.post(
    "/{merchant_id}/suspend",
    response_model=MerchantResponseSchema,
    summary="Suspend Merchant",
)
async def suspend_merchant(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
    request: Optional[StatusReasonSchema] = None,
) -> MerchantResponseSchema:
    reason = request.reason if request else None
    merchant = await merchant_service.suspend_merchant(merchant_id, reason)
    return _merchant_schema(merchant)


@admin_merchant_router.post(
    "/{merchant_id}/close",
    response_model=MerchantResponseSchema,
    summary="Close Merchant Account",
    description="Closing is terminal: a closed merchant cannot be reopened.",
)
async def close_merchant(
    merchant_id: UUID,
    merchant_service: MerchantServiceDep,
    request: Optional[StatusReasonSchema] = None,
) -> MerchantResponseSchema:
    reason = request.reason if request else None
    merchant = await merchant_service.close_merchant_account(merchant_id, reason)
    return _merchant_schema(merchant)


@admin_merchant_router.put(
    "/{merchant_id}/quota",
    response_model=MerchantResponseSchema,
    summary="Set API Quota Limit",
)
async def update_api_quota(
    merchant_id: UUID,
    request: UpdateApiQuotaSchema,
    merchant_service: MerchantServiceDep,
) -> MerchantResponseSchema:
    dto = UpdateApiQuotaRequest(api_quota_limit=request.api_quota_limit)
    merchant = await merchant_service.update_api_quota(merchant_id, dto)
    return _merchant_schema(merchant)
