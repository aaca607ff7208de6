"""Login, refresh and registration, plus the server-side auth dependencies (get_current_principal, require_*)."""

import dataclasses
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import InvalidCredentialError
from app.core.permissions import ADMIN_ONLY, PermissionCode, Requirement
from app.core.security import normalize_email, verify_password
from app.models import User
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    VerificationCodeRequest,
    VerificationCodeResponse,
)
from app.services.authorization import authorize
from app.services.code_store import ExpiringCodeStore
from app.services.credentials import Credential, CredentialIssuer, IssuedCredential
from app.services.registration import issue_verification_code, register_user
from app.services.resolver import effective_permissions, effective_role_names

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_credential_issuer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> CredentialIssuer:
    return CredentialIssuer(settings)


def get_code_store(request: Request) -> ExpiringCodeStore:
    """The verification-code store owned by the running application."""
    return request.app.state.code_store


def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Credential:
    """
    Dependency: verify the Bearer credential and return its claims.

    Raises InvalidCredentialError (401) when the token is missing, invalid or expired,
    or when its user no longer exists or has been deactivated. Roles and permissions
    come from the token snapshot unless AUTHZ_LIVE_PERMISSIONS is enabled.
    """
    if credentials is None:
        raise InvalidCredentialError("Not authenticated", reason="missing bearer token")
    credential = issuer.verify(credentials.credentials)
    user = db.get(User, credential.user_id)
    if user is None or not user.is_active:
        raise InvalidCredentialError(
            "Account is not available",
            reason=f"user_id={credential.user_id} missing or inactive",
        )
    if settings.AUTHZ_LIVE_PERMISSIONS:
        credential = dataclasses.replace(
            credential,
            roles=frozenset(effective_role_names(db, user.id)),
            permissions=frozenset(effective_permissions(db, user.id)),
        )
    return credential


def require(requirement: Requirement) -> Callable[..., Credential]:
    """Build a dependency that authenticates the caller and enforces requirement."""

    def dependency(
        principal: Annotated[Credential, Depends(get_current_principal)],
    ) -> Credential:
        return authorize(principal, requirement)

    return dependency


def require_permission(code: PermissionCode) -> Callable[..., Credential]:
    """Dependency: authenticated caller holding permission code. Raises 403 otherwise."""
    return require(Requirement(required_permission=code))


def require_admin(
    principal: Annotated[Credential, Depends(get_current_principal)],
) -> Credential:
    """Dependency: require authenticated user holding the Admin role. Raises 403 otherwise."""
    return authorize(principal, ADMIN_ONLY)


def _token_response(issued: IssuedCredential) -> TokenResponse:
    credential = issued.credential
    remaining = (credential.expires_at - datetime.now(UTC)).total_seconds()
    return TokenResponse(
        access_token=issued.token,
        token_type="bearer",
        expires_at=credential.expires_at,
        expires_in=max(int(remaining), 0),
        user_id=credential.user_id,
        email=credential.email,
        roles=sorted(credential.roles),
        permissions=sorted(credential.permissions),
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
) -> TokenResponse:
    """
    Authenticate with e-mail and password; returns a JWT carrying roles and permissions.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = db.query(User).filter(User.email == normalize_email(body.email)).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    issued = issuer.issue_for_login(db, user)
    logger.info("Login: user_id=%s", user.id)
    return _token_response(issued)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
) -> TokenResponse:
    """Re-issue a still-valid token with roles and permissions read from the database now."""
    if credentials is None:
        raise InvalidCredentialError("Not authenticated", reason="missing bearer token")
    return _token_response(issuer.refresh(db, credentials.credentials))


@router.post(
    "/verification-code",
    response_model=VerificationCodeResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def request_verification_code(
    body: VerificationCodeRequest,
    store: Annotated[ExpiringCodeStore, Depends(get_code_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VerificationCodeResponse:
    """
    Create a registration code for an e-mail address.

    Sending the code is handled outside this service; in the dev environment the code
    is echoed back so registration can be exercised locally.
    """
    code, expires_at = issue_verification_code(store, body.email)
    return VerificationCodeResponse(
        status="sent",
        expires_at=expires_at,
        code=code if settings.APP_ENV == "dev" else None,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[ExpiringCodeStore, Depends(get_code_store)],
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
) -> TokenResponse:
    """Create an account with the default role and return a credential for it."""
    user = register_user(db, store, body.email, body.password, body.verification_code)
    return _token_response(issuer.issue(db, user.id))


@router.get("/me", response_model=CurrentUser)
def me(
    principal: Annotated[Credential, Depends(get_current_principal)],
) -> CurrentUser:
    """The authenticated principal's identity and claims."""
    return CurrentUser(
        id=principal.user_id,
        email=principal.email,
        roles=sorted(principal.roles),
        permissions=sorted(principal.permissions),
    )
