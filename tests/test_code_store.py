"""Tests for the expiring in-memory code store."""

import unittest
from datetime import UTC, datetime, timedelta

from app.services.code_store import ExpiringCodeStore


class FakeTimer:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs).total_seconds()


class TestExpiringCodeStore(unittest.TestCase):
    def setUp(self) -> None:
        self.timer = FakeTimer()
        self.store = ExpiringCodeStore(timedelta(minutes=5), max_entries=3, timer=self.timer)

    def test_put_returns_expiry_and_get_returns_value(self) -> None:
        before = datetime.now(UTC)
        expires_at = self.store.put("a@example.com", "123456")
        after = datetime.now(UTC)
        self.assertTrue(before + timedelta(minutes=5) <= expires_at <= after + timedelta(minutes=5))
        self.assertEqual(self.store.get("a@example.com"), "123456")

    def test_keys_are_case_insensitive(self) -> None:
        self.store.put("  A@Example.com ", "123456")
        self.assertEqual(self.store.get("a@example.com"), "123456")

    def test_entry_expires(self) -> None:
        self.store.put("a@example.com", "123456")
        self.timer.advance(minutes=5)
        self.assertIsNone(self.store.get("a@example.com"))
        self.assertEqual(len(self.store), 0)

    def test_entry_alive_just_before_expiry(self) -> None:
        self.store.put("a@example.com", "123456")
        self.timer.advance(minutes=4, seconds=59)
        self.assertEqual(self.store.get("a@example.com"), "123456")

    def test_verify_consumes_by_default(self) -> None:
        self.store.put("a@example.com", "123456")
        self.assertTrue(self.store.verify("a@example.com", "123456"))
        self.assertFalse(self.store.verify("a@example.com", "123456"))

    def test_verify_without_consume(self) -> None:
        self.store.put("a@example.com", "123456")
        self.assertTrue(self.store.verify("a@example.com", "123456", consume=False))
        self.assertTrue(self.store.verify("a@example.com", "123456"))

    def test_wrong_value_keeps_entry(self) -> None:
        self.store.put("a@example.com", "123456")
        self.assertFalse(self.store.verify("a@example.com", "654321"))
        self.assertFalse(self.store.verify("a@example.com", "ünïcode"))
        self.assertEqual(self.store.get("a@example.com"), "123456")

    def test_expired_entry_fails_verification(self) -> None:
        self.store.put("a@example.com", "123456")
        self.timer.advance(minutes=6)
        self.assertFalse(self.store.verify("a@example.com", "123456"))

    def test_put_replaces_previous_value(self) -> None:
        self.store.put("a@example.com", "111111")
        self.store.put("a@example.com", "222222")
        self.assertFalse(self.store.verify("a@example.com", "111111"))
        self.assertTrue(self.store.verify("a@example.com", "222222"))

    def test_full_store_evicts_least_recently_used(self) -> None:
        self.store.put("first@example.com", "1")
        self.store.put("second@example.com", "2")
        self.store.put("third@example.com", "3")
        self.store.get("first@example.com")
        self.store.put("fourth@example.com", "4")
        self.assertEqual(len(self.store), 3)
        self.assertIsNone(self.store.get("second@example.com"))
        self.assertEqual(self.store.get("first@example.com"), "1")
        self.assertEqual(self.store.get("fourth@example.com"), "4")

    def test_evict_expired_counts_removed_entries(self) -> None:
        self.store.put("first@example.com", "1")
        self.timer.advance(minutes=3)
        self.store.put("second@example.com", "2")
        self.timer.advance(minutes=3)
        self.assertEqual(self.store.evict_expired(), 1)
        self.assertEqual(len(self.store), 1)
        self.assertEqual(self.store.evict_expired(), 0)

    def test_remove(self) -> None:
        self.store.put("a@example.com", "123456")
        self.store.remove("A@example.com")
        self.store.remove("missing@example.com")
        self.assertIsNone(self.store.get("a@example.com"))

    def test_invalid_configuration(self) -> None:
        with self.assertRaises(ValueError):
            ExpiringCodeStore(timedelta(0))
        with self.assertRaises(ValueError):
            ExpiringCodeStore(timedelta(minutes=1), max_entries=0)


if __name__ == "__main__":
    unittest.main()
