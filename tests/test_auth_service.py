"""Tests for AuthService: login, registration, logout and the offline administrator fallback."""

import unittest
from unittest.mock import MagicMock, patch

from bookmark_manager.core.database import StaticAvailability
from bookmark_manager.models import ROLE_ADMIN, ROLE_USER
from bookmark_manager.services.auth import AuthService
from bookmark_manager.services.bootstrap import OFFLINE_ADMIN_USER_ID, OfflineAdmin
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import (
    INVALID_CREDENTIALS_MESSAGE,
    DuplicateUsername,
    InvalidCredentials,
    InvalidInput,
    StoreUnavailable,
    ValidationError,
)
from bookmark_manager.services.sessions import SessionStore

from helpers import ADMIN_PASSWORD, ADMIN_USERNAME, fast_bcrypt, make_session_factory


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        patcher = fast_bcrypt()
        patcher.start()
        self.addCleanup(patcher.stop)
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)
        self.store = CredentialStore(self.db)
        self.sessions = SessionStore()
        self.availability = StaticAvailability(True)
        self.offline_admin = OfflineAdmin(ADMIN_USERNAME, password=ADMIN_PASSWORD)
        self.auth = AuthService(self.store, self.sessions, self.availability, self.offline_admin)


class TestRegisterThenLogin(AuthServiceTestCase):
    def test_login_after_register_references_same_user(self) -> None:
        registered = self.auth.register("alice", "secret1", "secret1")
        logged_in = self.auth.login("alice", "secret1")
        self.assertEqual(registered.user_id, logged_in.user_id)
        self.assertEqual(logged_in.username, "alice")
        self.assertEqual(logged_in.role, ROLE_USER)
        self.assertFalse(logged_in.offline)

    def test_register_logs_user_in(self) -> None:
        session = self.auth.register("alice", "secret1", "secret1")
        self.assertEqual(self.sessions.get(session.token), session)
        self.assertEqual(self.store.find_by_username("alice").role, ROLE_USER)

    def test_register_trims_username(self) -> None:
        self.auth.register("  alice  ", "secret1", "secret1")
        self.assertIsNotNone(self.store.find_by_username("alice"))
        self.assertEqual(self.auth.login(" alice ", "secret1").username, "alice")

    def test_duplicate_username_regardless_of_password(self) -> None:
        self.auth.register("alice", "secret1", "secret1")
        for password in ("secret1", "other1"):
            with self.subTest(password=password):
                with self.assertRaises(DuplicateUsername):
                    self.auth.register("alice", password, password)

    def test_insert_race_reports_duplicate(self) -> None:
        self.auth.register("alice", "secret1", "secret1")
        with patch.object(self.store, "find_by_username", return_value=None):
            with self.assertRaises(DuplicateUsername):
                self.auth.register("alice", "other1", "other1")

    def test_successful_login_records_last_login(self) -> None:
        session = self.auth.register("alice", "secret1", "secret1")
        self.auth.login("alice", "secret1")
        user = self.store.get_by_id(session.user_id)
        self.assertEqual(user.login_count, 1)
        self.assertIsNotNone(user.last_login)

    def test_alice_scenario(self) -> None:
        self.auth.register("alice", "secret1", "secret1")
        with self.assertRaises(DuplicateUsername):
            self.auth.register("alice", "other1", "other1")
        with self.assertRaises(InvalidCredentials):
            self.auth.login("alice", "wrong")
        self.assertEqual(self.auth.login("alice", "secret1").username, "alice")


class TestLoginFailures(AuthServiceTestCase):
    def test_unknown_user_and_wrong_password_are_indistinguishable(self) -> None:
        self.auth.register("realuser", "secret1", "secret1")
        with self.assertRaises(InvalidCredentials) as unknown:
            self.auth.login("nonexistent", "anything")
        with self.assertRaises(InvalidCredentials) as wrong:
            self.auth.login("realuser", "wrongpassword")
        self.assertIs(type(unknown.exception), type(wrong.exception))
        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(unknown.exception.message, INVALID_CREDENTIALS_MESSAGE)

    def test_failure_logs_do_not_reveal_existence(self) -> None:
        self.auth.register("realuser", "secret1", "secret1")
        with self.assertLogs("bookmark_manager.services.auth", level="WARNING") as unknown_logs:
            with self.assertRaises(InvalidCredentials):
                self.auth.login("nonexistent", "anything")
        with self.assertLogs("bookmark_manager.services.auth", level="WARNING") as wrong_logs:
            with self.assertRaises(InvalidCredentials):
                self.auth.login("realuser", "wrongpassword")
        self.assertEqual(
            unknown_logs.output[0].replace("nonexistent", "X"),
            wrong_logs.output[0].replace("realuser", "X"),
        )

    def test_empty_fields_are_invalid_input(self) -> None:
        for username, password in (("", "secret1"), ("alice", ""), ("   ", "secret1"), (None, None)):
            with self.subTest(username=username, password=password):
                with self.assertRaises(InvalidInput):
                    self.auth.login(username, password)

    def test_failed_login_creates_no_session(self) -> None:
        with self.assertRaises(InvalidCredentials):
            self.auth.login("nobody", "secret1")
        self.assertEqual(len(self.sessions), 0)

    def test_last_login_failure_does_not_block_login(self) -> None:
        self.auth.register("alice", "secret1", "secret1")
        with patch.object(self.store, "update_last_login", side_effect=StoreUnavailable()):
            session = self.auth.login("alice", "secret1")
        self.assertEqual(session.username, "alice")


class TestRegistrationValidation(AuthServiceTestCase):
    def test_short_password(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.auth.register("alice", "abc12", "abc12")
        self.assertIn("6", ctx.exception.message)
        self.assertEqual(ctx.exception.field, "password")

    def test_password_mismatch(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.auth.register("alice", "secret1", "secret2")
        self.assertIn("match", ctx.exception.message)

    def test_short_and_long_username(self) -> None:
        for username in ("ab", "x" * 31):
            with self.subTest(username=username):
                with self.assertRaises(ValidationError) as ctx:
                    self.auth.register(username, "secret1", "secret1")
                self.assertEqual(ctx.exception.field, "username")

    def test_password_over_72_bytes_is_rejected(self) -> None:
        # 25 CJK characters encode to 75 bytes.
        for password in ("a" * 72 + "REAL-SUFFIX", "密" * 25):
            with self.subTest(password=password):
                with self.assertRaises(ValidationError) as ctx:
                    self.auth.register("alice", password, password)
                self.assertEqual(ctx.exception.field, "password")
        self.assertIsNone(self.store.find_by_username("alice"))

    def test_72_byte_password_needs_every_byte(self) -> None:
        password = "a" * 71 + "Z"
        self.auth.register("alice", password, password)
        self.assertIsNotNone(self.auth.login("alice", password))
        for guess in ("a" * 72, "a" * 72 + "attacker-guess"):
            with self.subTest(guess=guess):
                with self.assertRaises(InvalidCredentials):
                    self.auth.login("alice", guess)

    def test_missing_fields_are_invalid_input(self) -> None:
        for args in (("", "secret1", "secret1"), ("alice", "", ""), ("alice", "secret1", None)):
            with self.subTest(args=args):
                with self.assertRaises(InvalidInput) as ctx:
                    self.auth.register(*args)
                self.assertIsInstance(ctx.exception, ValidationError)

    def test_failed_validation_persists_nothing(self) -> None:
        with self.assertRaises(ValidationError):
            self.auth.register("alice", "abc12", "abc12")
        self.assertIsNone(self.store.find_by_username("alice"))


class TestLogout(AuthServiceTestCase):
    def test_logged_out_session_no_longer_resolves(self) -> None:
        session = self.auth.register("alice", "secret1", "secret1")
        self.auth.logout(session.token)
        self.assertIsNone(self.sessions.get(session.token))

    def test_logout_without_session_is_a_no_op(self) -> None:
        self.auth.logout(None)
        self.auth.logout("unknown-token")

    def test_destroy_error_is_swallowed(self) -> None:
        sessions = MagicMock()
        sessions.destroy.side_effect = RuntimeError("session backend down")
        auth = AuthService(self.store, sessions, self.availability, self.offline_admin)
        with self.assertLogs("bookmark_manager.services.auth", level="ERROR"):
            auth.logout("some-token")


class TestOfflineFallback(AuthServiceTestCase):
    def test_only_default_admin_logs_in_while_store_down(self) -> None:
        self.auth.register("alice", "secret1", "secret1")
        self.availability.available = False

        session = self.auth.login(ADMIN_USERNAME, ADMIN_PASSWORD)
        self.assertTrue(session.offline)
        self.assertEqual(session.role, ROLE_ADMIN)
        self.assertEqual(session.user_id, OFFLINE_ADMIN_USER_ID)

        with self.assertRaises(InvalidCredentials):
            self.auth.login("alice", "secret1")

        self.availability.available = True
        self.assertEqual(self.auth.login("alice", "secret1").username, "alice")

    def test_wrong_admin_password_fails_offline(self) -> None:
        self.availability.available = False
        with self.assertRaises(InvalidCredentials):
            self.auth.login(ADMIN_USERNAME, "not-the-password")

    def test_lookup_connectivity_error_falls_back(self) -> None:
        store = MagicMock()
        store.find_by_username.side_effect = StoreUnavailable()
        availability = MagicMock()
        availability.is_available.return_value = True
        auth = AuthService(store, self.sessions, availability, self.offline_admin)

        self.assertTrue(auth.login(ADMIN_USERNAME, ADMIN_PASSWORD).offline)
        availability.mark_unavailable.assert_called()
        with self.assertRaises(InvalidCredentials):
            auth.login("alice", "secret1")

    def test_fallback_disabled_fails_closed(self) -> None:
        self.availability.available = False
        auth = AuthService(self.store, self.sessions, self.availability, offline_admin=None)
        with self.assertRaises(InvalidCredentials):
            auth.login(ADMIN_USERNAME, ADMIN_PASSWORD)

    def test_register_refused_while_store_down(self) -> None:
        self.availability.available = False
        with self.assertRaises(StoreUnavailable):
            self.auth.register("bob", "secret1", "secret1")


if __name__ == "__main__":
    unittest.main()
