"""
Client-side view guard for apps that hold a HealthSync bearer token.

This is a UX helper: it decides whether to render a view or enable an action without
a server round trip, so forbidden UI is not flashed. It reads the token's claims
WITHOUT verifying the signature, because clients never hold the signing key. It is
not a security boundary; the server re-checks every request.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import jwt

from app.core.permissions import (
    ANY_AUTHENTICATED,
    PermissionCode,
    Requirement,
    RoleName,
    as_code,
    missing_claim,
)


class GuardDecision(str, Enum):
    ALLOW = "allow"
    # No usable token: send the user to the login screen.
    LOGIN_REQUIRED = "login_required"
    # Logged in but lacking the role/permission: send the user back to their dashboard.
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class LocalClaims:
    """Unverified claims read from a locally held token."""

    user_id: str
    email: str
    roles: frozenset[str]
    permissions: frozenset[str]
    expires_at: float

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "LocalClaims":
        """Raises TypeError or ValueError when exp is not a number."""
        return cls(
            user_id=str(payload.get("sub", "")),
            email=str(payload.get("email", "")),
            roles=_string_set(payload.get("roles")),
            permissions=_string_set(payload.get("permissions")),
            expires_at=float(payload.get("exp") or 0),
        )


def _string_set(value: Any) -> frozenset[str]:
    # a claim that is not a list (e.g. "Admin") grants nothing
    if not isinstance(value, list):
        return frozenset()
    return frozenset(v for v in value if isinstance(v, str))


def read_claims(token: str | None) -> LocalClaims | None:
    """Decode token without verification; None if absent or not a JWT."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    try:
        return LocalClaims.from_payload(payload)
    except (TypeError, ValueError):
        return None


class ClientGuard:
    """Evaluate view requirements against the token the client currently holds."""

    def __init__(self, token: str | None, clock: Callable[[], float] = time.time) -> None:
        self._claims = read_claims(token)
        self._clock = clock

    @property
    def claims(self) -> LocalClaims | None:
        return self._claims

    @property
    def is_authenticated(self) -> bool:
        return self._claims is not None and self._claims.expires_at > self._clock()

    def is_admin(self) -> bool:
        return self.is_authenticated and RoleName.ADMIN.value in self._claims.roles

    def has_permission(self, code: PermissionCode | str) -> bool:
        return self.is_authenticated and as_code(code) in self._claims.permissions

    def has_all_permissions(self, codes: list[PermissionCode | str]) -> bool:
        return self.is_authenticated and all(self.has_permission(c) for c in codes)

    def has_any_permission(self, codes: list[PermissionCode | str]) -> bool:
        return any(self.has_permission(c) for c in codes)

    def check(self, requirement: Requirement = ANY_AUTHENTICATED) -> GuardDecision:
        if not self.is_authenticated:
            return GuardDecision.LOGIN_REQUIRED
        if missing_claim(self._claims.roles, self._claims.permissions, requirement):
            return GuardDecision.FORBIDDEN
        return GuardDecision.ALLOW

    def can_render(self, require_admin: bool = False, required_permission: PermissionCode | str | None = None) -> bool:
        """Shorthand for check(...) == ALLOW using the route/view guard options."""
        requirement = Requirement(require_admin=require_admin, required_permission=required_permission)
        return self.check(requirement) is GuardDecision.ALLOW
