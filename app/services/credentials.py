"""Credential issuer: snapshot a user's roles and permissions into a signed, expiring token.

A credential is a snapshot, not a live view. Role or grant changes made after issuance
do not show up in it until it is re-issued at the next login or refresh.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import jwt
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import InvalidCredentialError, UserNotFoundError
from app.core.security import create_access_token, decode_access_token
from app.models import User
from app.services.resolver import effective_permissions, effective_role_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Verified claim set carried by a bearer token."""

    user_id: int
    email: str
    roles: frozenset[str]
    permissions: frozenset[str]
    expires_at: datetime

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_permission(self, code: str) -> bool:
        return code in self.permissions


@dataclass(frozen=True)
class IssuedCredential:
    """A freshly signed token together with the claims it snapshots."""

    token: str
    credential: Credential

    @property
    def expires_at(self) -> datetime:
        return self.credential.expires_at


def _claim_set(payload: dict, name: str) -> frozenset[str]:
    value = payload.get(name, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidCredentialError(reason=f"claim '{name}' is not a list of strings")
    return frozenset(value)


class CredentialIssuer:
    """Issue and verify credentials. Holds no mutable state; safe to share across threads."""

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, session: Session, user_id: int) -> IssuedCredential:
        """Resolve roles and permissions for user_id now and sign them into a token."""
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return self._issue_for(session, user)

    def issue_for_login(self, session: Session, user: User) -> IssuedCredential:
        """Issue a credential and record the login time."""
        issued = self._issue_for(session, user)
        user.last_login_at = self._clock()
        session.commit()
        return issued

    def _issue_for(self, session: Session, user: User) -> IssuedCredential:
        roles = effective_role_names(session, user.id)
        permissions = effective_permissions(session, user.id)
        token, expires_at = create_access_token(
            sub=user.id,
            email=user.email,
            roles=roles,
            permissions=permissions,
            now=self._clock(),
            config=self._settings,
        )
        logger.debug(
            "Credential issued: user_id=%s, roles=%s, permission_count=%s",
            user.id,
            sorted(roles),
            len(permissions),
        )
        return IssuedCredential(
            token=token,
            credential=Credential(
                user_id=user.id,
                email=user.email,
                roles=frozenset(roles),
                permissions=frozenset(permissions),
                expires_at=expires_at,
            ),
        )

    def verify(self, token: str) -> Credential:
        """
        Check signature, expiry, issuer and audience and return the claim set.

        Raises InvalidCredentialError for any malformed, expired or tampered token.
        """
        if not token or not token.strip():
            raise InvalidCredentialError("Not authenticated", reason="empty token")
        try:
            payload = decode_access_token(token, config=self._settings)
        except jwt.ExpiredSignatureError as e:
            raise InvalidCredentialError(reason="expired") from e
        except jwt.PyJWTError as e:
            raise InvalidCredentialError(reason=f"{type(e).__name__}: {e}") from e

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidCredentialError(reason="sub is not an integer id") from e
        email = payload.get("email")
        if not isinstance(email, str):
            raise InvalidCredentialError(reason="email claim missing")
        return Credential(
            user_id=user_id,
            email=email,
            roles=_claim_set(payload, "roles"),
            permissions=_claim_set(payload, "permissions"),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )

    def refresh(self, session: Session, token: str) -> IssuedCredential:
        """
        Re-issue a still-valid credential from current database state.

        Inactive or deleted users cannot refresh.
        """
        credential = self.verify(token)
        user = session.get(User, credential.user_id)
        if user is None or not user.is_active:
            raise InvalidCredentialError(
                "Account is not available", reason="refresh for missing or inactive user"
            )
        return self._issue_for(session, user)
