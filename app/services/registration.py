"""Self-service registration: e-mail verification codes and account creation."""

import logging
import secrets
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    EmailAlreadyRegisteredError,
    InvalidVerificationCodeError,
    RoleNotFoundError,
)
from app.core.permissions import DEFAULT_ROLE
from app.core.security import hash_password, normalize_email
from app.models import User, UserRole
from app.services.catalog import get_role_by_name
from app.services.code_store import ExpiringCodeStore

logger = logging.getLogger(__name__)


def generate_code() -> str:
    """Six-digit numeric code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def issue_verification_code(store: ExpiringCodeStore, email: str) -> tuple[str, datetime]:
    """
    Create and store a code for email, replacing any earlier one.

    Returns (code, expires_at). Delivering the code is up to the caller.
    """
    code = generate_code()
    expires_at = store.put(normalize_email(email), code)
    logger.info("Verification code issued for %s", normalize_email(email))
    return code, expires_at


def email_registered(session: Session, email: str) -> bool:
    return (
        session.query(User.id).filter(User.email == normalize_email(email)).first()
        is not None
    )


def register_user(
    session: Session,
    store: ExpiringCodeStore,
    email: str,
    password: str,
    verification_code: str,
) -> User:
    """
    Create an active user holding the default role, after checking the e-mail code.

    The user row and its role assignment are committed together. The code is
    consumed only on success.
    """
    email_norm = normalize_email(email)
    if not store.verify(email_norm, verification_code, consume=False):
        raise InvalidVerificationCodeError()
    if email_registered(session, email_norm):
        raise EmailAlreadyRegisteredError()
    default_role = get_role_by_name(session, DEFAULT_ROLE)
    if default_role is None:
        raise RoleNotFoundError(DEFAULT_ROLE.value)

    user = User(email=email_norm, password_hash=hash_password(password), is_active=True)
    session.add(user)
    try:
        session.flush()
        session.add(UserRole(user_id=user.id, role_id=default_role.id))
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise EmailAlreadyRegisteredError() from e
    store.remove(email_norm)
    session.refresh(user)
    logger.info("User registered: user_id=%s, role=%s", user.id, default_role.name)
    return user
