"""ORM model for application users."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from app.models.base import Base


class User(Base):
    """
    User account: identity anchor for role assignments and credentials.

    email is stored lower-cased so the unique index is case-insensitive.
    Roles are not a column here; see UserRole.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
