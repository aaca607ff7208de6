"""Tests for the permission catalog: seeding and read-only grant lookups."""

import unittest

from app.core.permissions import ROLE_PERMISSIONS, PermissionCode, RoleName
from app.models import Permission, Role, RolePermission
from app.services.catalog import (
    get_role,
    get_role_by_name,
    list_roles,
    permissions_granted_to,
    seed_catalog,
)

from support import new_session, role_id


class TestSeedCatalog(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session(seed=False)

    def tearDown(self) -> None:
        self.session.close()

    def test_first_run_inserts_vocabulary(self) -> None:
        result = seed_catalog(self.session)
        self.assertTrue(result.changed)
        self.assertEqual(result.roles_added, len(RoleName))
        self.assertEqual(result.permissions_added, len(PermissionCode))
        expected_grants = sum(len(codes) for codes in ROLE_PERMISSIONS.values())
        self.assertEqual(result.grants_added, expected_grants)
        self.assertEqual(self.session.query(RolePermission).count(), expected_grants)

    def test_second_run_is_a_no_op(self) -> None:
        seed_catalog(self.session)
        result = seed_catalog(self.session)
        self.assertFalse(result.changed)
        self.assertEqual(self.session.query(Role).count(), len(RoleName))
        self.assertEqual(self.session.query(Permission).count(), len(PermissionCode))

    def test_fills_in_missing_grant(self) -> None:
        seed_catalog(self.session)
        admin_id = role_id(self.session, RoleName.ADMIN)
        self.session.query(RolePermission).filter(RolePermission.role_id == admin_id).delete()
        self.session.commit()

        result = seed_catalog(self.session)
        self.assertEqual(result.roles_added, 0)
        self.assertEqual(result.permissions_added, 0)
        self.assertEqual(result.grants_added, len(ROLE_PERMISSIONS[RoleName.ADMIN]))


class TestPermissionLookups(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()

    def tearDown(self) -> None:
        self.session.close()

    def test_permissions_granted_to_matches_seed(self) -> None:
        for role_name, codes in ROLE_PERMISSIONS.items():
            granted = permissions_granted_to(self.session, role_id(self.session, role_name))
            self.assertEqual(granted, {c.value for c in codes})

    def test_admin_can_manage_users_customer_cannot(self) -> None:
        admin = permissions_granted_to(self.session, role_id(self.session, RoleName.ADMIN))
        customer = permissions_granted_to(
            self.session, role_id(self.session, RoleName.CUSTOMER)
        )
        self.assertIn("USER_UPDATE_ROLE", admin)
        self.assertNotIn("USER_UPDATE_ROLE", customer)
        self.assertIn("GOAL_CREATE", customer)
        self.assertNotIn("GOAL_CREATE", admin)

    def test_unknown_role_has_no_permissions(self) -> None:
        self.assertEqual(permissions_granted_to(self.session, 9999), set())

    def test_role_without_grants_has_no_permissions(self) -> None:
        role = Role(name="Coach", description="")
        self.session.add(role)
        self.session.commit()
        self.assertEqual(permissions_granted_to(self.session, role.id), set())

    def test_get_role_by_name_accepts_enum_or_string(self) -> None:
        by_enum = get_role_by_name(self.session, RoleName.ADMIN)
        by_str = get_role_by_name(self.session, "Admin")
        self.assertIsNotNone(by_enum)
        self.assertEqual(by_enum.id, by_str.id)
        self.assertIsNone(get_role_by_name(self.session, "Nobody"))

    def test_get_role_by_id(self) -> None:
        admin_id = role_id(self.session, RoleName.ADMIN)
        self.assertEqual(get_role(self.session, admin_id).name, "Admin")
        self.assertIsNone(get_role(self.session, 9999))

    def test_list_roles_includes_codes(self) -> None:
        listed = {role.name: codes for role, codes in list_roles(self.session)}
        self.assertEqual(set(listed), {"Admin", "Customer"})
        self.assertIn("DASHBOARD_ADMIN", listed["Admin"])


if __name__ == "__main__":
    unittest.main()
