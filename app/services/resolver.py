"""Permission resolver: a user's effective roles and the distinct union of their grants."""

from sqlalchemy.orm import Session

from app.models import Permission, Role, RolePermission, UserRole


def effective_permissions(session: Session, user_id: int) -> set[str]:
    """
    Distinct permission codes across every role assigned to user_id.

    A code granted by several roles appears once. A user with no roles (or an unknown
    id) resolves to the empty set, which denies everything.
    """
    rows = (
        session.query(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .filter(UserRole.user_id == user_id)
        .distinct()
        .all()
    )
    return {code for (code,) in rows}


def effective_role_names(session: Session, user_id: int) -> set[str]:
    """Names of the roles assigned to user_id (display and role-based UI checks)."""
    rows = (
        session.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .all()
    )
    return {name for (name,) in rows}
