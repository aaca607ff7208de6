"""Admin user and role management. Every route declares its permission requirement."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin, require_permission
from app.core.database import get_db
from app.core.errors import UserNotFoundError
from app.core.permissions import PermissionCode
from app.models import User
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
from app.services import user_admin
from app.services.catalog import list_roles
from app.services.credentials import Credential
from app.services.resolver import effective_permissions, effective_role_names
from app.services.role_assignments import AssignmentStatus, RemovalStatus

router = APIRouter()

CanReadUsers = Annotated[Credential, Depends(require_permission(PermissionCode.USER_READ))]
CanUpdateRoles = Annotated[
    Credential, Depends(require_permission(PermissionCode.USER_UPDATE_ROLE))
]
CanBanUsers = Annotated[Credential, Depends(require_permission(PermissionCode.USER_BAN))]


def _require_user(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise UserNotFoundError(user_id)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _principal: CanReadUsers,
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users with their roles and status."""
    return UsersListResponse(users=user_admin.list_user_summaries(db))


@router.get("/users/{user_id}", response_model=UserSummary)
def get_user(
    user_id: int,
    _principal: CanReadUsers,
    db: Annotated[Session, Depends(get_db)],
) -> UserSummary:
    return user_admin.get_user_summary(db, user_id)


@router.get("/users/{user_id}/roles", response_model=UserRolesResponse)
def get_user_roles(
    user_id: int,
    _principal: CanReadUsers,
    db: Annotated[Session, Depends(get_db)],
) -> UserRolesResponse:
    """Role names currently assigned to the user (live database state)."""
    _require_user(db, user_id)
    return UserRolesResponse(user_id=user_id, roles=sorted(effective_role_names(db, user_id)))


@router.get("/users/{user_id}/permissions", response_model=UserPermissionsResponse)
def get_user_permissions(
    user_id: int,
    _principal: CanReadUsers,
    db: Annotated[Session, Depends(get_db)],
) -> UserPermissionsResponse:
    """Distinct permission codes across the user's roles (live database state)."""
    _require_user(db, user_id)
    return UserPermissionsResponse(
        user_id=user_id, permissions=sorted(effective_permissions(db, user_id))
    )


@router.post("/users/{user_id}/roles/{role_id}", response_model=RoleChangeResponse)
def assign_role(
    user_id: int,
    role_id: int,
    _principal: CanUpdateRoles,
    db: Annotated[Session, Depends(get_db)],
) -> RoleChangeResponse:
    """Assign a role. Re-assigning is a no-op reported as changed=false."""
    result = user_admin.assign_role_to_user(db, user_id, role_id)
    return RoleChangeResponse(
        changed=result is AssignmentStatus.ASSIGNED, status=result.value
    )


@router.delete("/users/{user_id}/roles/{role_id}", response_model=RoleChangeResponse)
def remove_role(
    user_id: int,
    role_id: int,
    principal: CanUpdateRoles,
    db: Annotated[Session, Depends(get_db)],
) -> RoleChangeResponse:
    """Remove a role. Removing an unassigned role is a no-op reported as changed=false."""
    result = user_admin.remove_role_from_user(
        db, user_id, role_id, acting_user_id=principal.user_id
    )
    return RoleChangeResponse(changed=result is RemovalStatus.REMOVED, status=result.value)


@router.put("/users/{user_id}/role", response_model=UserSummary)
def replace_role(
    user_id: int,
    body: ReplaceRoleRequest,
    principal: CanUpdateRoles,
    db: Annotated[Session, Depends(get_db)],
) -> UserSummary:
    """Make the given role the user's only role."""
    return user_admin.replace_user_role(
        db, user_id, body.role_id, acting_user_id=principal.user_id
    )


@router.put("/users/{user_id}/status", response_model=StatusChangeResponse)
def toggle_status(
    user_id: int,
    body: ToggleActiveRequest,
    principal: CanBanUsers,
    db: Annotated[Session, Depends(get_db)],
) -> StatusChangeResponse:
    """Activate or deactivate a user. Not allowed on one's own account."""
    changed = user_admin.toggle_active(
        db, user_id, body.is_active, acting_user_id=principal.user_id
    )
    return StatusChangeResponse(changed=changed)


@router.get("/roles", response_model=RolesListResponse)
def get_roles(
    _admin: Annotated[Credential, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> RolesListResponse:
    """Roles and the permission codes each grants (admin only)."""
    return RolesListResponse(
        roles=[
            RoleItem(
                id=role.id,
                name=role.name,
                description=role.description or "",
                permissions=sorted(codes),
            )
            for role, codes in list_roles(db)
        ]
    )
