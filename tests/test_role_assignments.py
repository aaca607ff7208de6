"""Tests for the role assignment store: idempotent assign/remove and single-commit replace."""

import unittest

from app.core.errors import RoleNotFoundError, UserNotFoundError
from app.core.permissions import RoleName
from app.models import UserRole
from app.services.role_assignments import (
    AssignmentStatus,
    RemovalStatus,
    assign_role,
    assigned_role_ids,
    remove_role,
    replace_role,
)

from support import make_user, new_session, role_id, role_names


class TestAssignRole(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()
        self.user = make_user(self.session, "runner@example.com")
        self.customer_id = role_id(self.session, RoleName.CUSTOMER)

    def tearDown(self) -> None:
        self.session.close()

    def test_assign_then_reassign(self) -> None:
        first = assign_role(self.session, self.user.id, self.customer_id)
        second = assign_role(self.session, self.user.id, self.customer_id)
        self.assertIs(first, AssignmentStatus.ASSIGNED)
        self.assertIs(second, AssignmentStatus.ALREADY_ASSIGNED)
        rows = self.session.query(UserRole).filter(UserRole.user_id == self.user.id).count()
        self.assertEqual(rows, 1)

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            assign_role(self.session, 9999, self.customer_id)

    def test_unknown_role(self) -> None:
        with self.assertRaises(RoleNotFoundError):
            assign_role(self.session, self.user.id, 9999)


class TestRemoveRole(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()
        self.user = make_user(self.session, "runner@example.com", RoleName.CUSTOMER)
        self.customer_id = role_id(self.session, RoleName.CUSTOMER)

    def tearDown(self) -> None:
        self.session.close()

    def test_remove_then_remove_again(self) -> None:
        self.assertIs(
            remove_role(self.session, self.user.id, self.customer_id), RemovalStatus.REMOVED
        )
        self.assertIs(
            remove_role(self.session, self.user.id, self.customer_id),
            RemovalStatus.NOT_ASSIGNED,
        )
        self.assertEqual(assigned_role_ids(self.session, self.user.id), set())

    def test_remove_unknown_pair_is_not_an_error(self) -> None:
        self.assertIs(remove_role(self.session, 9999, 9999), RemovalStatus.NOT_ASSIGNED)


class TestReplaceRole(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()
        self.user = make_user(
            self.session, "both@example.com", RoleName.ADMIN, RoleName.CUSTOMER
        )

    def tearDown(self) -> None:
        self.session.close()

    def test_replace_leaves_exactly_the_new_role(self) -> None:
        changed = replace_role(
            self.session, self.user.id, role_id(self.session, RoleName.CUSTOMER)
        )
        self.assertTrue(changed)
        self.assertEqual(role_names(self.session, self.user.id), {"Customer"})

    def test_replace_with_current_sole_role_writes_nothing(self) -> None:
        customer_id = role_id(self.session, RoleName.CUSTOMER)
        replace_role(self.session, self.user.id, customer_id)
        self.assertFalse(replace_role(self.session, self.user.id, customer_id))
        self.assertEqual(role_names(self.session, self.user.id), {"Customer"})

    def test_replace_for_user_without_roles(self) -> None:
        bare = make_user(self.session, "bare@example.com")
        self.assertTrue(replace_role(self.session, bare.id, role_id(self.session, RoleName.ADMIN)))
        self.assertEqual(role_names(self.session, bare.id), {"Admin"})

    def test_unknown_role_leaves_assignments_untouched(self) -> None:
        with self.assertRaises(RoleNotFoundError):
            replace_role(self.session, self.user.id, 9999)
        self.session.rollback()
        self.assertEqual(role_names(self.session, self.user.id), {"Admin", "Customer"})

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            replace_role(self.session, 9999, role_id(self.session, RoleName.ADMIN))


if __name__ == "__main__":
    unittest.main()
