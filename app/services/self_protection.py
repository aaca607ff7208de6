"""Guards that stop administrators from locking themselves, or everyone, out."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import LastAdminProtectionError, SelfModificationDeniedError
from app.core.permissions import RoleName
from app.models import Role, User, UserRole

logger = logging.getLogger(__name__)


def ensure_not_self(target_user_id: int, acting_user_id: int | None, action: str) -> None:
    """Reject an access-reducing operation aimed at the acting user's own account."""
    if acting_user_id is not None and target_user_id == acting_user_id:
        logger.warning(
            "Self-modification denied: user_id=%s, action=%s", acting_user_id, action
        )
        raise SelfModificationDeniedError(action)


def _lock_admin_role(session: Session) -> Role | None:
    # Every admin-reducing operation takes this row lock first, so concurrent removals
    # serialize and each one counts the state committed by the previous one.
    return (
        session.query(Role)
        .filter(Role.name == RoleName.ADMIN.value)
        .with_for_update()
        .first()
    )


def _is_active_admin(session: Session, user_id: int, admin_role_id: int) -> bool:
    return (
        session.query(UserRole.id)
        .join(User, User.id == UserRole.user_id)
        .filter(
            UserRole.user_id == user_id,
            UserRole.role_id == admin_role_id,
            User.is_active.is_(True),
        )
        .first()
        is not None
    )


def count_other_active_admins(session: Session, user_id: int, admin_role_id: int) -> int:
    return (
        session.query(func.count(func.distinct(User.id)))
        .join(UserRole, UserRole.user_id == User.id)
        .filter(
            UserRole.role_id == admin_role_id,
            User.is_active.is_(True),
            User.id != user_id,
        )
        .scalar()
        or 0
    )


def ensure_other_admin_remains(session: Session, target_user_id: int) -> None:
    """
    Raise LastAdminProtectionError if target_user_id is the only active Admin.

    Call before removing the Admin role from, or deactivating, target_user_id, in the
    same transaction as the mutation. Targets that are not active admins pass.
    """
    admin_role = _lock_admin_role(session)
    if admin_role is None:
        return
    if not _is_active_admin(session, target_user_id, admin_role.id):
        return
    if count_other_active_admins(session, target_user_id, admin_role.id) == 0:
        logger.warning("Last-admin protection triggered: user_id=%s", target_user_id)
        session.rollback()
        raise LastAdminProtectionError(target_user_id)
