"""
Shared authorization vocabulary: permission codes, role names and seed grants.

Both the server guard and the client guard import from here so the two layers cannot
drift apart. Members are ``str`` enums and compare equal to their string values, so
they can be used wherever a plain code is expected (JWT claims, DB rows).

Which role grants which permission is seed data only: at runtime the database is the
source of truth (see ``app.services.catalog``).
"""

from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum


class RoleName(str, Enum):
    ADMIN = "Admin"
    CUSTOMER = "Customer"


class PermissionCode(str, Enum):
    # User management
    USER_READ = "USER_READ"
    USER_BAN = "USER_BAN"
    USER_UPDATE_ROLE = "USER_UPDATE_ROLE"
    USER_DELETE = "USER_DELETE"

    # Exercise library
    EXERCISE_READ = "EXERCISE_READ"
    EXERCISE_CREATE = "EXERCISE_CREATE"
    EXERCISE_UPDATE = "EXERCISE_UPDATE"
    EXERCISE_DELETE = "EXERCISE_DELETE"

    # Food library
    FOOD_READ = "FOOD_READ"
    FOOD_CREATE = "FOOD_CREATE"
    FOOD_UPDATE = "FOOD_UPDATE"
    FOOD_DELETE = "FOOD_DELETE"

    # Workout logs
    WORKOUT_LOG_READ = "WORKOUT_LOG_READ"
    WORKOUT_LOG_CREATE = "WORKOUT_LOG_CREATE"
    WORKOUT_LOG_UPDATE = "WORKOUT_LOG_UPDATE"
    WORKOUT_LOG_DELETE = "WORKOUT_LOG_DELETE"

    # Nutrition logs
    NUTRITION_LOG_READ = "NUTRITION_LOG_READ"
    NUTRITION_LOG_CREATE = "NUTRITION_LOG_CREATE"
    NUTRITION_LOG_UPDATE = "NUTRITION_LOG_UPDATE"
    NUTRITION_LOG_DELETE = "NUTRITION_LOG_DELETE"

    # Goals
    GOAL_READ = "GOAL_READ"
    GOAL_CREATE = "GOAL_CREATE"
    GOAL_UPDATE = "GOAL_UPDATE"
    GOAL_DELETE = "GOAL_DELETE"

    # Dashboards
    DASHBOARD_VIEW = "DASHBOARD_VIEW"
    DASHBOARD_ADMIN = "DASHBOARD_ADMIN"


# Role assigned at registration.
DEFAULT_ROLE = RoleName.CUSTOMER

ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.ADMIN: "Administrator with user and content management access",
    RoleName.CUSTOMER: "Regular user tracking their own workouts, nutrition and goals",
}

P = PermissionCode

ROLE_PERMISSIONS: dict[RoleName, tuple[PermissionCode, ...]] = {
    RoleName.ADMIN: (
        P.USER_READ,
        P.USER_BAN,
        P.USER_UPDATE_ROLE,
        P.USER_DELETE,
        P.EXERCISE_READ,
        P.EXERCISE_CREATE,
        P.EXERCISE_UPDATE,
        P.EXERCISE_DELETE,
        P.FOOD_READ,
        P.FOOD_CREATE,
        P.FOOD_UPDATE,
        P.FOOD_DELETE,
        # Read-only across all users' logs
        P.WORKOUT_LOG_READ,
        P.NUTRITION_LOG_READ,
        P.GOAL_READ,
        P.DASHBOARD_VIEW,
        P.DASHBOARD_ADMIN,
    ),
    RoleName.CUSTOMER: (
        P.EXERCISE_READ,
        P.FOOD_READ,
        P.WORKOUT_LOG_READ,
        P.WORKOUT_LOG_CREATE,
        P.WORKOUT_LOG_UPDATE,
        P.WORKOUT_LOG_DELETE,
        P.NUTRITION_LOG_READ,
        P.NUTRITION_LOG_CREATE,
        P.NUTRITION_LOG_UPDATE,
        P.NUTRITION_LOG_DELETE,
        P.GOAL_READ,
        P.GOAL_CREATE,
        P.GOAL_UPDATE,
        P.GOAL_DELETE,
        P.DASHBOARD_VIEW,
    ),
}

del P


def permission_description(code: PermissionCode) -> str:
    """Human-readable label derived from the code, e.g. FOOD_CREATE -> 'Food create'."""
    return code.value.replace("_", " ").capitalize()


def as_code(value: str | Enum) -> str:
    """Plain string value of a role name or permission code (enum member or str)."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class Requirement:
    """
    What an operation or view demands of the caller.

    With neither field set, any authenticated principal qualifies. The same
    configuration drives both the server guard and the client guard.
    """

    require_admin: bool = False
    required_permission: PermissionCode | str | None = None

    @property
    def is_open(self) -> bool:
        return not self.require_admin and self.required_permission is None


ANY_AUTHENTICATED = Requirement()
ADMIN_ONLY = Requirement(require_admin=True)


def missing_claim(
    roles: Collection[str], permissions: Collection[str], requirement: Requirement
) -> str | None:
    """Return the first unmet part of requirement ('role:...' or 'permission:...'), or None."""
    if requirement.require_admin and RoleName.ADMIN.value not in roles:
        return f"role:{RoleName.ADMIN.value}"
    if requirement.required_permission is not None:
        code = as_code(requirement.required_permission)
        if code not in permissions:
            return f"permission:{code}"
    return None
