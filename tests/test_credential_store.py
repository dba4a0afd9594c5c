"""Tests for CredentialStore and the User model's password hashing guard (SQLite in memory)."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from bookmark_manager.core.security import hash_password, is_password_hash, verify_password
from bookmark_manager.models import ROLE_ADMIN, ROLE_USER, User
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import DuplicateUsername, StoreUnavailable

from helpers import fast_bcrypt, make_session_factory


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        patcher = fast_bcrypt()
        patcher.start()
        self.addCleanup(patcher.stop)
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)
        self.store = CredentialStore(self.db)


class TestCreateAndFind(StoreTestCase):
    def test_create_then_find_by_username(self) -> None:
        created = self.store.create("alice", hash_password("secret1"))
        found = self.store.find_by_username("alice")
        self.assertIsNotNone(found)
        self.assertEqual(found.id, created.id)
        self.assertEqual(found.role, ROLE_USER)
        self.assertEqual(found.login_count, 0)
        self.assertIsNone(found.last_login)
        self.assertIsNotNone(found.created_at)
        self.assertTrue(verify_password("secret1", found.password_hash))

    def test_find_is_case_sensitive(self) -> None:
        self.store.create("alice", hash_password("secret1"))
        self.assertIsNone(self.store.find_by_username("Alice"))

    def test_find_unknown_returns_none(self) -> None:
        self.assertIsNone(self.store.find_by_username("nobody"))

    def test_create_with_role_and_display_name(self) -> None:
        user = self.store.create(
            "boss", hash_password("secret1"), role=ROLE_ADMIN, display_name="The Boss"
        )
        self.assertEqual(user.role, ROLE_ADMIN)
        self.assertEqual(self.store.get_by_id(user.id).display_name, "The Boss")

    def test_duplicate_username_raises(self) -> None:
        self.store.create("alice", hash_password("secret1"))
        with self.assertRaises(DuplicateUsername):
            self.store.create("alice", hash_password("other1"))
        # Session stays usable after the failed insert.
        self.assertEqual(len(self.store.list_users()), 1)

    def test_list_users_ordered_by_id(self) -> None:
        for name in ("carol", "alice", "bob"):
            self.store.create(name, hash_password("secret1"))
        self.assertEqual([u.username for u in self.store.list_users()], ["carol", "alice", "bob"])


class TestUpdateLastLogin(StoreTestCase):
    def test_increments_counter_and_sets_timestamp(self) -> None:
        user = self.store.create("alice", hash_password("secret1"))
        self.store.update_last_login(user.id)
        self.store.update_last_login(user.id)
        refreshed = self.store.get_by_id(user.id)
        self.assertEqual(refreshed.login_count, 2)
        self.assertIsNotNone(refreshed.last_login)


class TestPasswordHashGuard(StoreTestCase):
    """Plaintext assigned to password_hash is hashed; hashes are never re-hashed."""

    def test_plaintext_is_hashed_on_assignment(self) -> None:
        user = User(username="alice", password_hash="secret1")
        self.assertTrue(is_password_hash(user.password_hash))
        self.assertTrue(verify_password("secret1", user.password_hash))

    def test_resave_without_password_change_keeps_hash(self) -> None:
        user = self.store.create("alice", hash_password("secret1"))
        original = user.password_hash
        user.display_name = "Alice"
        self.db.commit()
        self.assertEqual(self.store.get_by_id(user.id).password_hash, original)

    def test_reassigning_same_hash_keeps_it(self) -> None:
        user = self.store.create("alice", hash_password("secret1"))
        original = user.password_hash
        user.password_hash = original
        self.db.commit()
        self.assertEqual(self.store.get_by_id(user.id).password_hash, original)


class TestStoreUnreachable(unittest.TestCase):
    """Connectivity errors become StoreUnavailable, never raw SQLAlchemy errors."""

    def _broken_session(self) -> MagicMock:
        db = MagicMock()
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        db.query.side_effect = error
        db.commit.side_effect = error
        db.execute.side_effect = error
        return db

    def test_find_raises_store_unavailable(self) -> None:
        db = self._broken_session()
        with self.assertRaises(StoreUnavailable):
            CredentialStore(db).find_by_username("alice")
        db.rollback.assert_called_once()

    def test_create_raises_store_unavailable(self) -> None:
        db = self._broken_session()
        with fast_bcrypt(), self.assertRaises(StoreUnavailable):
            CredentialStore(db).create("alice", hash_password("secret1"))

    def test_update_last_login_raises_store_unavailable(self) -> None:
        with self.assertRaises(StoreUnavailable):
            CredentialStore(self._broken_session()).update_last_login(1)


if __name__ == "__main__":
    unittest.main()
