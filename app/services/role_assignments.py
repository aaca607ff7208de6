"""Role assignment store: idempotent assign/remove and transactional replace, keyed by ids."""

import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import RoleNotFoundError, UserNotFoundError
from app.models import Role, User, UserRole
from app.services.catalog import get_role

logger = logging.getLogger(__name__)


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    ALREADY_ASSIGNED = "already_assigned"


class RemovalStatus(str, Enum):
    REMOVED = "removed"
    NOT_ASSIGNED = "not_assigned"


def _require_user(session: Session, user_id: int, *, lock: bool = False) -> User:
    query = session.query(User).filter(User.id == user_id)
    if lock:
        query = query.with_for_update()
    user = query.first()
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def _require_role(session: Session, role_id: int) -> Role:
    role = get_role(session, role_id)
    if role is None:
        raise RoleNotFoundError(role_id)
    return role


def _assignment_exists(session: Session, user_id: int, role_id: int) -> bool:
    return (
        session.query(UserRole.id)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
        .first()
        is not None
    )


def assigned_role_ids(session: Session, user_id: int) -> set[int]:
    rows = session.query(UserRole.role_id).filter(UserRole.user_id == user_id).all()
    return {role_id for (role_id,) in rows}


def assign_role(session: Session, user_id: int, role_id: int) -> AssignmentStatus:
    """
    Give role_id to user_id.

    Raises UserNotFoundError / RoleNotFoundError. An existing assignment is reported as
    ALREADY_ASSIGNED without writing; so is losing a race on the unique constraint.
    """
    _require_user(session, user_id)
    _require_role(session, role_id)
    if _assignment_exists(session, user_id, role_id):
        return AssignmentStatus.ALREADY_ASSIGNED

    session.add(UserRole(user_id=user_id, role_id=role_id))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        if _assignment_exists(session, user_id, role_id):
            return AssignmentStatus.ALREADY_ASSIGNED
        raise
    logger.info("Role assigned: user_id=%s, role_id=%s", user_id, role_id)
    return AssignmentStatus.ASSIGNED


def remove_role(session: Session, user_id: int, role_id: int) -> RemovalStatus:
    """Take role_id away from user_id. A missing assignment is NOT_ASSIGNED and writes nothing."""
    deleted = (
        session.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        session.rollback()
        return RemovalStatus.NOT_ASSIGNED
    session.commit()
    logger.info("Role removed: user_id=%s, role_id=%s", user_id, role_id)
    return RemovalStatus.REMOVED


def replace_role(session: Session, user_id: int, new_role_id: int) -> bool:
    """
    Make new_role_id the user's only role, in a single transaction.

    The user row is locked first so concurrent replacements for the same user
    serialize. Old rows are deleted and the new row inserted before one commit, so no
    reader sees the user with both roles or with none. Returns False when the user
    already held exactly new_role_id (nothing written).
    """
    _require_user(session, user_id, lock=True)
    _require_role(session, new_role_id)

    current = assigned_role_ids(session, user_id)
    if current == {new_role_id}:
        session.rollback()
        return False

    (
        session.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id != new_role_id)
        .delete(synchronize_session=False)
    )
    if new_role_id not in current:
        session.add(UserRole(user_id=user_id, role_id=new_role_id))
    session.commit()
    logger.info(
        "Role replaced: user_id=%s, old_role_ids=%s, new_role_id=%s",
        user_id,
        sorted(current),
        new_role_id,
    )
    return True
