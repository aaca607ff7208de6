"""Tests for verification codes and self-service registration."""

import unittest
from datetime import timedelta

from app.core.errors import (
    EmailAlreadyRegisteredError,
    InvalidVerificationCodeError,
    RoleNotFoundError,
)
from app.core.permissions import RoleName
from app.core.security import verify_password
from app.models import Role
from app.services.code_store import ExpiringCodeStore
from app.services.registration import (
    email_registered,
    generate_code,
    issue_verification_code,
    register_user,
)

from support import PASSWORD, make_user, new_session, role_names


class TestGenerateCode(unittest.TestCase):
    def test_six_digits(self) -> None:
        for _ in range(50):
            code = generate_code()
            self.assertEqual(len(code), 6)
            self.assertTrue(100000 <= int(code) <= 999999)


class TestRegisterUser(unittest.TestCase):
    def setUp(self) -> None:
        self.session = new_session()
        self.store = ExpiringCodeStore(timedelta(minutes=5))

    def tearDown(self) -> None:
        self.session.close()

    def test_registers_with_default_role(self) -> None:
        code, _ = issue_verification_code(self.store, "New@Example.com")
        user = register_user(self.session, self.store, "new@example.com", PASSWORD, code)
        self.assertEqual(user.email, "new@example.com")
        self.assertTrue(user.is_active)
        self.assertTrue(verify_password(PASSWORD, user.password_hash))
        self.assertEqual(role_names(self.session, user.id), {RoleName.CUSTOMER.value})
        # the code is single-use
        self.assertIsNone(self.store.get("new@example.com"))

    def test_wrong_code_is_rejected_and_code_kept(self) -> None:
        code, _ = issue_verification_code(self.store, "new@example.com")
        with self.assertRaises(InvalidVerificationCodeError):
            register_user(self.session, self.store, "new@example.com", PASSWORD, "000000")
        self.assertEqual(self.store.get("new@example.com"), code)
        self.assertFalse(email_registered(self.session, "new@example.com"))

    def test_no_code_issued(self) -> None:
        with self.assertRaises(InvalidVerificationCodeError):
            register_user(self.session, self.store, "new@example.com", PASSWORD, "123456")

    def test_email_taken_case_insensitively(self) -> None:
        make_user(self.session, "taken@example.com", RoleName.CUSTOMER)
        code, _ = issue_verification_code(self.store, "TAKEN@example.com")
        with self.assertRaises(EmailAlreadyRegisteredError):
            register_user(self.session, self.store, "TAKEN@example.com", PASSWORD, code)

    def test_missing_default_role(self) -> None:
        self.session.query(Role).filter(Role.name == RoleName.CUSTOMER.value).delete()
        self.session.commit()
        code, _ = issue_verification_code(self.store, "new@example.com")
        with self.assertRaises(RoleNotFoundError):
            register_user(self.session, self.store, "new@example.com", PASSWORD, code)


if __name__ == "__main__":
    unittest.main()
