"""Authoritative authorization check applied to every privileged operation."""

import logging

from app.core.errors import InsufficientPermissionError
from app.core.permissions import Requirement, missing_claim
from app.services.credentials import Credential

logger = logging.getLogger(__name__)


def authorize(credential: Credential, requirement: Requirement) -> Credential:
    """
    Raise InsufficientPermissionError unless credential satisfies requirement.

    The credential must already be verified (signature and expiry); this only
    inspects its claims.
    """
    missing = missing_claim(credential.roles, credential.permissions, requirement)
    if missing is None:
        return credential
    logger.warning(
        "Authorization denied: user_id=%s, missing=%s", credential.user_id, missing
    )
    if missing.startswith("role:"):
        raise InsufficientPermissionError(missing, "Admin access required")
    raise InsufficientPermissionError(missing)
