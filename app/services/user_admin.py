"""Admin user-management commands: role changes and account status, behind self-protection guards."""

import logging
from collections import defaultdict

from sqlalchemy.orm import Session

from app.core.errors import RoleNotFoundError, UserNotFoundError
from app.core.permissions import RoleName
from app.models import Role, User, UserRole
from app.schemas.admin import UserSummary
from app.services import role_assignments
from app.services.role_assignments import AssignmentStatus, RemovalStatus
from app.services.self_protection import ensure_not_self, ensure_other_admin_remains

logger = logging.getLogger(__name__)


def _primary_role(role_names: set[str]) -> str | None:
    if RoleName.ADMIN.value in role_names:
        return RoleName.ADMIN.value
    return min(role_names) if role_names else None


def _summary(user: User, role_names: set[str]) -> UserSummary:
    return UserSummary(
        id=user.id,
        email=user.email,
        role=_primary_role(role_names),
        roles=sorted(role_names),
        is_active=user.is_active,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


def _role_names_by_user(session: Session, user_ids: list[int]) -> dict[int, set[str]]:
    names: dict[int, set[str]] = defaultdict(set)
    if not user_ids:
        return names
    rows = (
        session.query(UserRole.user_id, Role.name)
        .join(Role, Role.id == UserRole.role_id)
        .filter(UserRole.user_id.in_(user_ids))
        .all()
    )
    for user_id, name in rows:
        names[user_id].add(name)
    return names


def get_user_summary(session: Session, user_id: int) -> UserSummary:
    user = session.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return _summary(user, _role_names_by_user(session, [user.id])[user.id])


def list_user_summaries(session: Session) -> list[UserSummary]:
    users = session.query(User).order_by(User.id).all()
    names = _role_names_by_user(session, [u.id for u in users])
    return [_summary(u, names[u.id]) for u in users]


def assign_role_to_user(session: Session, user_id: int, role_id: int) -> AssignmentStatus:
    """Adding a role never reduces access, so it needs no self-protection check."""
    return role_assignments.assign_role(session, user_id, role_id)


def remove_role_from_user(
    session: Session, user_id: int, role_id: int, acting_user_id: int
) -> RemovalStatus:
    """
    Remove one role from a user on behalf of acting_user_id.

    Rejects removing a role from oneself and removing Admin from the last active
    admin. An unknown role id is simply NOT_ASSIGNED.
    """
    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)
    ensure_not_self(user_id, acting_user_id, "remove a role")

    role = session.get(Role, role_id)
    if role is not None and role.name == RoleName.ADMIN.value:
        ensure_other_admin_remains(session, user_id)
    status = role_assignments.remove_role(session, user_id, role_id)
    logger.info(
        "Remove role: acting_user_id=%s, user_id=%s, role_id=%s, status=%s",
        acting_user_id,
        user_id,
        role_id,
        status.value,
    )
    return status


def replace_user_role(
    session: Session, user_id: int, new_role_id: int, acting_user_id: int
) -> UserSummary:
    """Make new_role_id the user's only role and return the updated summary."""
    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)
    new_role = session.get(Role, new_role_id)
    if new_role is None:
        raise RoleNotFoundError(new_role_id)
    ensure_not_self(user_id, acting_user_id, "change your own role")

    if new_role.name != RoleName.ADMIN.value:
        ensure_other_admin_remains(session, user_id)
    changed = role_assignments.replace_role(session, user_id, new_role_id)
    logger.info(
        "Replace role: acting_user_id=%s, user_id=%s, new_role=%s, changed=%s",
        acting_user_id,
        user_id,
        new_role.name,
        changed,
    )
    return get_user_summary(session, user_id)


def toggle_active(
    session: Session, user_id: int, is_active: bool, acting_user_id: int
) -> bool:
    """
    Activate or deactivate a user. Returns False when the flag already had that value.

    Acting on one's own account is always rejected, in either direction.
    """
    ensure_not_self(user_id, acting_user_id, "change the status")
    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)

    if not is_active:
        ensure_other_admin_remains(session, user_id)
    user = (
        session.query(User)
        .filter(User.id == user_id)
        .with_for_update()
        .populate_existing()
        .one()
    )
    if user.is_active == is_active:
        session.rollback()
        return False
    user.is_active = is_active
    session.commit()
    logger.info(
        "Toggle active: acting_user_id=%s, user_id=%s, is_active=%s",
        acting_user_id,
        user_id,
        is_active,
    )
    return True
