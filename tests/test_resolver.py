"""Tests for effective permission resolution."""

import unittest

from app.core.permissions import ROLE_PERMISSIONS, RoleName
from app.services.resolver import effective_permissions, effective_role_names

from support import make_user, new_session


class TestEffectivePermissions(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()

    def tearDown(self) -> None:
        self.session.close()

    def test_single_role(self) -> None:
        user = make_user(self.session, "c@example.com", RoleName.CUSTOMER)
        self.assertEqual(
            effective_permissions(self.session, user.id),
            {c.value for c in ROLE_PERMISSIONS[RoleName.CUSTOMER]},
        )

    def test_union_of_roles_is_distinct(self) -> None:
        user = make_user(self.session, "ac@example.com", RoleName.ADMIN, RoleName.CUSTOMER)
        expected = {
            c.value
            for codes in (ROLE_PERMISSIONS[RoleName.ADMIN], ROLE_PERMISSIONS[RoleName.CUSTOMER])
            for c in codes
        }
        resolved = effective_permissions(self.session, user.id)
        self.assertEqual(resolved, expected)
        # EXERCISE_READ is granted by both roles
        self.assertIn("EXERCISE_READ", resolved)

    def test_user_without_roles_resolves_to_empty(self) -> None:
        user = make_user(self.session, "nobody@example.com")
        self.assertEqual(effective_permissions(self.session, user.id), set())
        self.assertEqual(effective_role_names(self.session, user.id), set())

    def test_unknown_user_resolves_to_empty(self) -> None:
        self.assertEqual(effective_permissions(self.session, 9999), set())

    def test_role_names(self) -> None:
        user = make_user(self.session, "ac@example.com", RoleName.ADMIN, RoleName.CUSTOMER)
        self.assertEqual(effective_role_names(self.session, user.id), {"Admin", "Customer"})


if __name__ == "__main__":
    unittest.main()
