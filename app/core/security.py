"""Password hashing and JWT encoding/decoding primitives for credentials."""

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings, settings
from app.core.permissions import as_code

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for email and password validation.
EMAIL_MIN_LEN = 3
EMAIL_MAX_LEN = 254
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Claims every credential must carry; decode rejects tokens missing any of them.
REQUIRED_CLAIMS = ("sub", "exp", "iat", "iss", "aud")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and compare the lower-cased form."""
    return email.strip().lower()


def create_access_token(
    sub: str | int,
    email: str,
    roles: Iterable[str],
    permissions: Iterable[str],
    *,
    now: datetime | None = None,
    config: Settings | None = None,
) -> tuple[str, datetime]:
    """
    Create a signed JWT carrying identity, role names and permission codes.

    Roles and permissions are written as sorted lists so equal claim sets give
    equal payloads. Returns (token, expires_at).
    """
    cfg = config or settings
    issued_at = now or datetime.now(UTC)
    expire = issued_at + timedelta(minutes=cfg.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "email": email,
        "roles": sorted({as_code(r) for r in roles}),
        "permissions": sorted({as_code(p) for p in permissions}),
        "iss": cfg.JWT_ISSUER,
        "aud": cfg.JWT_AUDIENCE,
        "jti": uuid.uuid4().hex,
        "exp": expire,
        "iat": issued_at,
    }
    token = jwt.encode(
        payload,
        cfg.JWT_SECRET.get_secret_value(),
        algorithm=cfg.JWT_ALGORITHM,
    )
    return token, expire


def decode_access_token(token: str, *, config: Settings | None = None) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload.
    Raises jwt.PyJWTError on invalid signature, expiry, issuer, audience or missing claims.
    """
    cfg = config or settings
    return jwt.decode(
        token,
        cfg.JWT_SECRET.get_secret_value(),
        algorithms=[cfg.JWT_ALGORITHM],
        audience=cfg.JWT_AUDIENCE,
        issuer=cfg.JWT_ISSUER,
        options={"require": list(REQUIRED_CLAIMS)},
    )
