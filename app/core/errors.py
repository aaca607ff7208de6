"""Domain exceptions raised by the authorization services.

Services raise these; ``app.main`` maps them to HTTP responses. Idempotent no-ops
(already assigned, not assigned) are status values, not exceptions.
"""


class AuthzError(Exception):
    """Base class for authorization-core errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(AuthzError):
    """A user or role id does not resolve."""

    status_code = 404


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class RoleNotFoundError(NotFoundError):
    def __init__(self, role: int | str) -> None:
        self.role = role
        if isinstance(role, int):
            super().__init__(f"Role with ID {role} not found")
        else:
            super().__init__(f"Role '{role}' not found")


class SelfModificationDeniedError(AuthzError):
    """The acting user targets themself with an operation that reduces their own access."""

    status_code = 400

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"You cannot {action} on your own account")


class LastAdminProtectionError(AuthzError):
    """The operation would leave the system without any active administrator."""

    status_code = 409

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(
            f"User {user_id} is the last active administrator; at least one active "
            "user must keep the Admin role"
        )


class EmailAlreadyRegisteredError(AuthzError):
    status_code = 409

    def __init__(self) -> None:
        super().__init__("Email is already registered")


class InvalidVerificationCodeError(AuthzError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Invalid or expired verification code")


class InvalidCredentialError(AuthzError):
    """Authentication failure: missing, malformed, expired or badly signed credential."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token", reason: str | None = None) -> None:
        # reason is for logs only and never returned to the caller
        self.reason = reason or message
        super().__init__(message)


class InsufficientPermissionError(AuthzError):
    """Authorization failure: the credential is valid but lacks the required claim."""

    status_code = 403

    def __init__(self, missing: str, message: str | None = None) -> None:
        self.missing = missing
        super().__init__(message or "You do not have permission to perform this action")
