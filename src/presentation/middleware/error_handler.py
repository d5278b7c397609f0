"""Error handling middleware and exception handlers."""

import math
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from src.core.clock import utc_now
from src.domain.exceptions import (
    DomainException,
    AccountLockedException,
    ApiQuotaExceededException,
    BankAccountAlreadyVerifiedException,
    BankAccountInvalidException,
    BankAccountNotFoundException,
    BankAccountVerificationFailedException,
    ForbiddenException,
    KycAlreadyApprovedException,
    KycAlreadySubmittedException,
    KycDocumentRequiredException,
    KycInvalidStatusException,
    KycNotStartedException,
    MerchantAlreadyExistsException,
    MerchantClosedException,
    MerchantInactiveException,
    MerchantEmailAlreadyVerifiedException,
    MerchantInvalidStatusException,
    MerchantNotFoundException,
    MerchantSuspendedException,
    UnauthorizedException,
    ValidationFailedException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)

NOT_FOUND_ERRORS = (
    MerchantNotFoundException,
    BankAccountNotFoundException,
)

CONFLICT_ERRORS = (
    MerchantAlreadyExistsException,
    MerchantInvalidStatusException,
    MerchantSuspendedException,
    MerchantClosedException,
    MerchantInactiveException,
    MerchantEmailAlreadyVerifiedException,
    KycNotStartedException,
    KycAlreadySubmittedException,
    KycAlreadyApprovedException,
    KycInvalidStatusException,
    BankAccountAlreadyVerifiedException,
)

VALIDATION_ERRORS = (
    ValidationFailedException,
    BankAccountInvalidException,
    KycDocumentRequiredException,
)

# Exception attributes copied into the response "details" object
_DETAIL_ATTRIBUTES = (
    "field",
    "missing",
    "current_status",
    "requested_status",
    "requested",
    "limit",
    "retry_after_minutes",
)


def _error_response(
    status_code: int,
    exc: DomainException,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "error": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    details = {
        name: getattr(exc, name)
        for name in _DETAIL_ATTRIBUTES
        if getattr(exc, name, None) is not None
    }
    if details:
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _retry_after_seconds(exc: ApiQuotaExceededException) -> Optional[int]:
    if exc.reset_at is None:
        return None
    return max(math.ceil((exc.reset_at - utc_now()).total_seconds()), 0)


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    async def not_found_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Handle missing merchants and bank accounts."""
        return _error_response(404, exc)

    async def conflict_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Handle duplicates and actions not allowed in the current state."""
        logger.info(
            "domain_conflict",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(409, exc)

    async def validation_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Handle business field validation errors."""
        return _error_response(400, exc)

    for exc_class in NOT_FOUND_ERRORS:
        app.add_exception_handler(exc_class, not_found_handler)
    for exc_class in CONFLICT_ERRORS:
        app.add_exception_handler(exc_class, conflict_handler)
    for exc_class in VALIDATION_ERRORS:
        app.add_exception_handler(exc_class, validation_handler)

    @app.exception_handler(ApiQuotaExceededException)
    async def quota_exceeded_handler(
        request: Request,
        exc: ApiQuotaExceededException,
    ) -> JSONResponse:
        """Handle exhausted API quota."""
        retry_after = _retry_after_seconds(exc)
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        return _error_response(429, exc, headers=headers)

    @app.exception_handler(UnauthorizedException)
    async def unauthorized_handler(
        request: Request,
        exc: UnauthorizedException,
    ) -> JSONResponse:
        """Handle missing or invalid credentials."""
        return _error_response(401, exc, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(ForbiddenException)
    async def forbidden_handler(
        request: Request,
        exc: ForbiddenException,
    ) -> JSONResponse:
        """Handle forbidden actions, including locked admin accounts."""
        if isinstance(exc, AccountLockedException):
            logger.warning(
                "admin_account_locked",
                request_id=get_request_id(),
                email=exc.email,
            )
        return _error_response(403, exc)

    @app.exception_handler(BankAccountVerificationFailedException)
    async def bank_verification_failed_handler(
        request: Request,
        exc: BankAccountVerificationFailedException,
    ) -> JSONResponse:
        """Handle bank accounts rejected by the verification provider."""
        logger.warning(
            "bank_verification_rejected",
            request_id=get_request_id(),
            error=exc.error,
        )
        return _error_response(422, exc)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "request_id": get_request_id(),
            },
        )
