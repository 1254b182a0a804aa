from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import unittest

from sqlalchemy.exc import IntegrityError, OperationalError

from app.domain.entities.user import UnconfirmedUser, UserRole, UserStatus
from app.domain.exceptions import (
    EmailTakenError,
    InternalError,
    PhoneTakenError,
    RefreshTokenNotFoundError,
    UserNotFoundError,
)
from app.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_refresh_token_record,
    map_row_to_user,
    map_row_to_user_credentials,
)
from app.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository


REPOSITORY_SOURCE = "app/infrastructure/db/repositories/accounts_repository.py"


class FakeResult:
    def __init__(self, rows=(), rowcount=0):
        self._rows = list(rows)
        self.rowcount = rowcount

    def mappings(self):
        return self

    def one(self):
        return self._rows[0]

    def first(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    def __init__(self, engine):
        self._engine = engine

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, statement, params=None):
        self._engine.executed.append((str(statement), params))
        if self._engine.error is not None:
            raise self._engine.error
        return self._engine.result


class FakeEngine:
    def __init__(self, result=None, error=None):
        self.result = result or FakeResult()
        self.error = error
        self.executed = []

    def connect(self):
        return FakeConnection(self)

    def begin(self):
        return FakeConnection(self)


def _unique_violation(constraint: str, column: str, value: str) -> IntegrityError:
    orig = Exception(
        f'duplicate key value violates unique constraint "{constraint}"\n'
        f"DETAIL:  Key ({column})=({value}) already exists."
    )
    return IntegrityError("INSERT INTO public.users", {}, orig)


PENDING_USER = UnconfirmedUser(name="Alice", email="a@x.com", password_hash="hash", phone="+10001")


class AccountsRepositoryTests(unittest.TestCase):
    def test_mapper_maps_inserted_user_row(self):
        row = {
            "id": 7,
            "firstname": "Alice",
            "email": "a@x.com",
            "password_hash": "hash",
            "phone": "+10001",
            "created_at": datetime(2026, 2, 1, 10, 0, 0),
            "status": "active",
            "role": "user",
        }
        mapped = map_row_to_user(row)
        self.assertEqual(mapped.id, 7)
        self.assertEqual(mapped.name, "Alice")
        self.assertEqual(mapped.status, UserStatus.ACTIVE)
        self.assertEqual(mapped.role, UserRole.USER)
        self.assertEqual(mapped.created_at.tzinfo, timezone.utc)

    def test_mapper_rejects_unknown_status(self):
        row = {"id": 1, "password_hash": "hash", "status": "deleted", "role": "user"}
        with self.assertRaises(ValueError):
            map_row_to_user_credentials(row)

    def test_mapper_normalizes_refresh_expiry_to_utc(self):
        row = {
            "user_id": 3,
            "token_id": "jti-1",
            "expires_at": datetime(2026, 3, 1, 12, 0, 0),
        }
        mapped = map_row_to_refresh_token_record(row)
        self.assertEqual(mapped.expires_at, datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))
        self.assertEqual(mapped.token_id, "jti-1")

    def test_insert_user_maps_email_unique_violation_to_conflict(self):
        engine = FakeEngine(error=_unique_violation("users_email_key", "email", "a@x.com"))
        with self.assertRaises(EmailTakenError):
            SqlAccountsRepository(engine).insert_user(user=PENDING_USER)

    def test_insert_user_maps_phone_unique_violation_to_conflict(self):
        engine = FakeEngine(error=_unique_violation("users_phone_key", "phone", "+10001"))
        with self.assertRaises(PhoneTakenError):
            SqlAccountsRepository(engine).insert_user(user=PENDING_USER)

    def test_insert_user_unknown_integrity_error_is_internal(self):
        orig = Exception('null value in column "firstname" violates not-null constraint')
        engine = FakeEngine(error=IntegrityError("INSERT INTO public.users", {}, orig))
        with self.assertRaises(InternalError):
            SqlAccountsRepository(engine).insert_user(user=PENDING_USER)

    def test_insert_user_returns_mapped_row(self):
        row = {
            "id": 9,
            "firstname": "Alice",
            "email": "a@x.com",
            "password_hash": "hash",
            "phone": "+10001",
            "created_at": datetime(2026, 2, 1, 10, 0, 0, tzinfo=timezone.utc),
            "status": "active",
            "role": "user",
        }
        engine = FakeEngine(result=FakeResult(rows=[row]))
        user = SqlAccountsRepository(engine).insert_user(user=PENDING_USER)
        self.assertEqual(user.id, 9)
        self.assertEqual(engine.executed[0][1]["firstname"], "Alice")

    def test_availability_check_reports_email_before_phone(self):
        engine = FakeEngine(result=FakeResult(rows=[{"email_taken": True, "phone_taken": True}]))
        with self.assertRaises(EmailTakenError):
            SqlAccountsRepository(engine).ensure_email_and_phone_available(email="a@x.com", phone="+10001")

    def test_availability_check_reports_phone_conflict(self):
        engine = FakeEngine(result=FakeResult(rows=[{"email_taken": False, "phone_taken": True}]))
        with self.assertRaises(PhoneTakenError):
            SqlAccountsRepository(engine).ensure_email_and_phone_available(email="a@x.com", phone="+10001")

    def test_availability_check_passes_when_nothing_matches(self):
        engine = FakeEngine(result=FakeResult(rows=[{"email_taken": None, "phone_taken": None}]))
        SqlAccountsRepository(engine).ensure_email_and_phone_available(email="a@x.com", phone="+10001")

    def test_set_status_on_missing_user_is_not_found(self):
        engine = FakeEngine(result=FakeResult(rowcount=0))
        with self.assertRaises(UserNotFoundError):
            SqlAccountsRepository(engine).set_status(user_id=42, status=UserStatus.ACTIVE)
        self.assertEqual(engine.executed[0][1], {"user_id": 42, "status": "active"})

    def test_set_status_updates_existing_user(self):
        engine = FakeEngine(result=FakeResult(rowcount=1))
        SqlAccountsRepository(engine).set_status(user_id=42, status=UserStatus.SUSPENDED)
        self.assertEqual(engine.executed[0][1]["status"], "suspended")

    def test_missing_refresh_token_row_is_not_found(self):
        engine = FakeEngine(result=FakeResult(rows=[]))
        with self.assertRaises(RefreshTokenNotFoundError):
            SqlAccountsRepository(engine).get_refresh_token_record(user_id=3)

    def test_driver_errors_surface_as_internal_without_detail(self):
        engine = FakeEngine(error=OperationalError("SELECT", {}, Exception("server closed the connection")))
        with self.assertRaises(InternalError) as ctx:
            SqlAccountsRepository(engine).find_public_by_id(user_id=1)
        self.assertNotIn("server closed", str(ctx.exception))

    def test_refresh_token_is_upserted_per_user(self):
        source = Path(REPOSITORY_SOURCE).read_text(encoding="utf-8")
        self.assertIn("ON CONFLICT (user_id) DO UPDATE", source)
        self.assertIn("SET token_id = EXCLUDED.token_id", source)
        self.assertIn("expires_at = EXCLUDED.expires_at", source)

    def test_sign_out_deletes_refresh_token_row(self):
        source = Path(REPOSITORY_SOURCE).read_text(encoding="utf-8")
        self.assertIn("DELETE FROM public.refresh_tokens", source)

    def test_availability_check_reports_email_and_phone_separately(self):
        source = Path(REPOSITORY_SOURCE).read_text(encoding="utf-8")
        self.assertIn("bool_or(email = :email) AS email_taken", source)
        self.assertIn("bool_or(phone = :phone) AS phone_taken", source)

    def test_login_history_is_append_only(self):
        source = Path(REPOSITORY_SOURCE).read_text(encoding="utf-8")
        self.assertIn("INSERT INTO public.login_history (user_id, ip_address)", source)
        self.assertNotIn("UPDATE public.login_history", source)
        self.assertNotIn("DELETE FROM public.login_history", source)


if __name__ == "__main__":
    unittest.main()
