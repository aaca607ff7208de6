"""Permission catalog: read-only lookups over roles/grants plus idempotent bootstrap seeding."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.permissions import (
    ROLE_DESCRIPTIONS,
    ROLE_PERMISSIONS,
    PermissionCode,
    RoleName,
    as_code,
    permission_description,
)
from app.models import Permission, Role, RolePermission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedResult:
    """Rows inserted by one seed run (all zero when the catalog was already complete)."""

    roles_added: int = 0
    permissions_added: int = 0
    grants_added: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.roles_added or self.permissions_added or self.grants_added)


def permissions_granted_to(session: Session, role_id: int) -> set[str]:
    """Return the permission codes granted to role_id. Empty set for no grants or unknown role."""
    rows = (
        session.query(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .all()
    )
    return {code for (code,) in rows}


def get_role(session: Session, role_id: int) -> Role | None:
    return session.get(Role, role_id)


def get_role_by_name(session: Session, name: str | RoleName) -> Role | None:
    return session.query(Role).filter(Role.name == as_code(name)).first()


def list_roles(session: Session) -> list[tuple[Role, set[str]]]:
    """All roles ordered by id, each with its granted permission codes (for display)."""
    roles = session.query(Role).order_by(Role.id).all()
    grants: dict[int, set[str]] = {role.id: set() for role in roles}
    rows = (
        session.query(RolePermission.role_id, Permission.code)
        .join(Permission, Permission.id == RolePermission.permission_id)
        .all()
    )
    for role_id, code in rows:
        grants.setdefault(role_id, set()).add(code)
    return [(role, grants[role.id]) for role in roles]


def seed_catalog(session: Session) -> SeedResult:
    """
    Insert any missing roles, permissions and role grants from the shared vocabulary.

    Existing rows are left untouched, so running this on every start is safe. Grants
    present in the database but absent from the vocabulary are not removed.
    """
    roles_by_name = {role.name: role for role in session.query(Role).all()}
    perms_by_code = {perm.code: perm for perm in session.query(Permission).all()}

    roles_added = 0
    for role_name in RoleName:
        if role_name.value not in roles_by_name:
            role = Role(name=role_name.value, description=ROLE_DESCRIPTIONS.get(role_name, ""))
            session.add(role)
            roles_by_name[role.name] = role
            roles_added += 1

    permissions_added = 0
    for code in PermissionCode:
        if code.value not in perms_by_code:
            perm = Permission(code=code.value, description=permission_description(code))
            session.add(perm)
            perms_by_code[perm.code] = perm
            permissions_added += 1

    session.flush()

    existing_grants = {
        (role_id, permission_id)
        for role_id, permission_id in session.query(
            RolePermission.role_id, RolePermission.permission_id
        ).all()
    }
    grants_added = 0
    for role_name, codes in ROLE_PERMISSIONS.items():
        role = roles_by_name[role_name.value]
        for code in codes:
            key = (role.id, perms_by_code[code.value].id)
            if key in existing_grants:
                continue
            session.add(RolePermission(role_id=key[0], permission_id=key[1]))
            existing_grants.add(key)
            grants_added += 1

    session.commit()
    result = SeedResult(
        roles_added=roles_added,
        permissions_added=permissions_added,
        grants_added=grants_added,
    )
    if result.changed:
        logger.info(
            "Catalog seeded: roles_added=%s, permissions_added=%s, grants_added=%s",
            roles_added,
            permissions_added,
            grants_added,
        )
    return result
