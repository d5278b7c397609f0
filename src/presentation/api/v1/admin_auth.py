"""Admin authentication endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response

from src.application.dto import AdminLoginRequest
from src.application.services import AdminAuthService
from src.core.dependencies import get_admin_auth_service
from src.presentation.schemas import (
    AdminLoginResponseSchema,
    AdminLoginSchema,
    AdminLogoutSchema,
    AdminRefreshResponseSchema,
    AdminRefreshSchema,
    ErrorResponseSchema,
)

admin_auth_router = APIRouter(
    prefix="/admin/auth",
    responses={
        401: {"model": ErrorResponseSchema, "description": "Invalid credentials or token"},
    },
)

AdminAuthServiceDep = Annotated[AdminAuthService, Depends(get_admin_auth_service)]


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@admin_auth_router.post(
    "/login",
    response_model=AdminLoginResponseSchema,
    summary="Admin Login",
    description="""
    Exchange admin credentials for an access token and a refresh token.

    After five failed attempts inside fifteen minutes the account is
    locked and every attempt returns 403 until the window passes.
    """,
    responses={
        403: {"model": ErrorResponseSchema, "description": "Account locked"},
    },
)
async def login(
    body: AdminLoginSchema,
    request: Request,
    auth_service: AdminAuthServiceDep,
) -> AdminLoginResponseSchema:
    dto = AdminLoginRequest(
        email=body.email,
        password=body.password,
        user_agent=request.headers.get("User-Agent"),
        ip_address=_client_ip(request),
    )
    result = await auth_service.login(dto)
    return AdminLoginResponseSchema.model_validate(result)


@admin_auth_router.post(
    "/refresh",
    response_model=AdminRefreshResponseSchema,
    summary="Refresh Admin Access Token",
)
async def refresh(
    body: AdminRefreshSchema,
    request: Request,
    auth_service: AdminAuthServiceDep,
) -> AdminRefreshResponseSchema:
    result = await auth_service.refresh(
        body.refresh_token,
        user_agent=request.headers.get("User-Agent"),
        ip_address=_client_ip(request),
    )
    return AdminRefreshResponseSchema.model_validate(result)


@admin_auth_router.post(
    "/logout",
    status_code=204,
    response_class=Response,
    summary="Admin Logout",
    description="Invalidate the session behind a refresh token. Unknown tokens are ignored.",
)
async def logout(
    body: AdminLogoutSchema,
    auth_service: AdminAuthServiceDep,
) -> Response:
    await auth_service.logout(body.refresh_token)
    return Response(status_code=204)
