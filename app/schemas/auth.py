"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=3, max_length=254, description="Account e-mail")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class VerificationCodeRequest(BaseModel):
    """Ask for a registration code to be sent to an e-mail address."""

    email: str = Field(..., min_length=3, max_length=254)


class VerificationCodeResponse(BaseModel):
    """Acknowledgement of a code request. code is only populated in the dev environment."""

    status: str = Field(default="sent")
    expires_at: datetime
    code: str | None = Field(default=None, description="Echoed only when APP_ENV=dev")


class RegisterRequest(BaseModel):
    """Self-service registration; the new account gets the default role."""

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)
    verification_code: str = Field(..., min_length=1, max_length=16)


class TokenResponse(BaseModel):
    """Signed credential plus the claims it snapshots, so clients can drive UI guards."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime
    expires_in: int = Field(..., description="Seconds until expiry")
    user_id: int
    email: str
    roles: list[str]
    permissions: list[str]


class CurrentUser(BaseModel):
    """Authenticated principal as seen by the server guard."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    roles: list[str]
    permissions: list[str]
