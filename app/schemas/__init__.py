"""Pydantic request/response schemas."""

from app.schemas.admin import (
    ReplaceRoleRequest,
    RoleChangeResponse,
    RoleItem,
    RolesListResponse,
    StatusChangeResponse,
    ToggleActiveRequest,
    UserPermissionsResponse,
    UserRolesResponse,
    UsersListResponse,
    UserSummary,
)
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    VerificationCodeRequest,
    VerificationCodeResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "ReplaceRoleRequest",
    "RoleChangeResponse",
    "RoleItem",
    "RolesListResponse",
    "StatusChangeResponse",
    "ToggleActiveRequest",
    "TokenResponse",
    "UserPermissionsResponse",
    "UserRolesResponse",
    "UserSummary",
    "UsersListResponse",
    "VerificationCodeRequest",
    "VerificationCodeResponse",
]
