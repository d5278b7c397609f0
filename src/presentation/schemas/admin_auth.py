"""Admin authentication Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .merchant import EMAIL_PATTERN


class AdminLoginSchema(BaseModel):
    """Schema for POST /v1/admin/auth/login request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "admin@example.com",
                    "password": "SecureAdminPass123!",
                }
            ]
        }
    )

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)


class AdminRefreshSchema(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Admin refresh token")


class AdminLogoutSchema(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token to invalidate")


class AdminProfileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str = Field(..., examples=["admin"])


class AdminRefreshResponseSchema(BaseModel):
    """Schema for POST /v1/admin/auth/refresh response body."""

    model_config = ConfigDict(from_attributes=True)

    access_token: str = Field(..., description="JWT access token for admin routes")
    expires_in: int = Field(..., description="Access token lifetime in seconds", examples=[7200])
    admin: AdminProfileSchema


class AdminLoginResponseSchema(AdminRefreshResponseSchema):
    """Schema for POST /v1/admin/auth/login response body."""

    refresh_token: str = Field(..., description="Refresh token for obtaining new access tokens")
