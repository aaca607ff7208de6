"""Request/response schemas for admin user and role management."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """User entry for admin views (no password)."""

    id: int
    email: str
    role: str | None = Field(default=None, description="Primary role (Admin wins when held)")
    roles: list[str] = Field(default_factory=list)
    is_active: bool
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class UsersListResponse(BaseModel):
    users: list[UserSummary]


class ReplaceRoleRequest(BaseModel):
    role_id: int = Field(..., ge=1)


class ToggleActiveRequest(BaseModel):
    is_active: bool


class RoleChangeResponse(BaseModel):
    """Outcome of an assign/remove call. changed=False means the call was a no-op."""

    changed: bool
    status: str


class StatusChangeResponse(BaseModel):
    changed: bool


class UserRolesResponse(BaseModel):
    user_id: int
    roles: list[str]


class UserPermissionsResponse(BaseModel):
    user_id: int
    permissions: list[str]


class RoleItem(BaseModel):
    id: int
    name: str
    description: str
    permissions: list[str]


class RolesListResponse(BaseModel):
    roles: list[RoleItem]
