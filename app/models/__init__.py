"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.role import Permission, Role, RolePermission, UserRole
from app.models.user import User

__all__ = ["Base", "Permission", "Role", "RolePermission", "User", "UserRole"]
