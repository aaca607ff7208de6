"""Core app configuration, database and authorization vocabulary."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.permissions import PermissionCode, RoleName

__all__ = ["get_settings", "settings", "get_db", "PermissionCode", "RoleName"]
