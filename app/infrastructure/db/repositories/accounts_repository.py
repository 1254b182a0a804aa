from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.application.ports.accounts_port import AccountsPort
from app.domain.entities.user import (
    LoginHistoryEntry,
    PublicUser,
    RefreshTokenRecord,
    UnconfirmedUser,
    User,
    UserCredentials,
    UserStatus,
)
from app.domain.exceptions import (
    EmailTakenError,
    InternalError,
    PhoneTakenError,
    RefreshTokenNotFoundError,
    UserNotFoundError,
)
from app.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_login_history_entry,
    map_row_to_public_user,
    map_row_to_refresh_token_record,
    map_row_to_user,
    map_row_to_user_credentials,
)


logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "A user with this email already exists."
PHONE_TAKEN_MESSAGE = "A user with this phone number already exists."


class SqlAccountsRepository(AccountsPort):
    def __init__(self, engine):
        self._engine = engine

    def ensure_email_and_phone_available(self, *, email: str, phone: str) -> None:
        sql = """
            SELECT
                bool_or(email = :email) AS email_taken,
                bool_or(phone = :phone) AS phone_taken
            FROM public.users
            WHERE email = :email
               OR phone = :phone
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"email": email, "phone": phone}).mappings().one()
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: availability_check_failed")
            raise InternalError() from exc

        if row["email_taken"]:
            raise EmailTakenError(EMAIL_TAKEN_MESSAGE)
        if row["phone_taken"]:
            raise PhoneTakenError(PHONE_TAKEN_MESSAGE)

    def insert_user(self, *, user: UnconfirmedUser) -> User:
        sql = """
            INSERT INTO public.users (firstname, email, password_hash, phone)
            VALUES (:firstname, :email, :password_hash, :phone)
            RETURNING id, firstname, email, password_hash, phone, created_at, status, role
        """
        params = {
            "firstname": user.name,
            "email": user.email,
            "password_hash": user.password_hash,
            "phone": user.phone,
        }
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            # A second pending registration for the same email or phone confirmed after the first.
            detail = str(exc.orig)
            logger.warning("accounts_repository: insert_user_conflict detail=%s", detail)
            if "email" in detail:
                raise EmailTakenError(EMAIL_TAKEN_MESSAGE) from exc
            if "phone" in detail:
                raise PhoneTakenError(PHONE_TAKEN_MESSAGE) from exc
            raise InternalError() from exc
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: insert_user_failed")
            raise InternalError() from exc
        return map_row_to_user(row)

    def find_credentials_by_email(self, *, email: str) -> UserCredentials:
        sql = """
            SELECT id, password_hash, status, role
            FROM public.users
            WHERE email = :email
            LIMIT 1
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"email": email}).mappings().first()
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: find_credentials_failed")
            raise InternalError() from exc
        if row is None:
            raise UserNotFoundError("User not found.")
        return map_row_to_user_credentials(row)

    def find_public_by_id(self, *, user_id: int) -> PublicUser:
        sql = """
            SELECT id, email, role
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: find_public_failed user_id=%s", user_id)
            raise InternalError() from exc
        if row is None:
            raise UserNotFoundError("User not found.")
        return map_row_to_public_user(row)

    def set_status(self, *, user_id: int, status: UserStatus) -> None:
        sql = """
            UPDATE public.users
            SET status = :status
            WHERE id = :user_id
        """
        try:
            with self._engine.begin() as conn:
                result = conn.execute(text(sql), {"user_id": user_id, "status": UserStatus(status).value})
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: set_status_failed user_id=%s", user_id)
            raise InternalError() from exc
        if result.rowcount == 0:
            raise UserNotFoundError("User not found.")

    def upsert_refresh_token(
        self,
        *,
        user_id: int,
        token: str,
        token_id: str,
        expires_at: datetime,
    ) -> None:
        sql = """
            INSERT INTO public.refresh_tokens (user_id, token_id, token, expires_at, created_at)
            VALUES (:user_id, :token_id, :token, :expires_at, :created_at)
            ON CONFLICT (user_id) DO UPDATE
            SET token_id = EXCLUDED.token_id,
                token = EXCLUDED.token,
                expires_at = EXCLUDED.expires_at,
                created_at = EXCLUDED.created_at
        """
        params = {
            "user_id": user_id,
            "token_id": token_id,
            "token": token,
            "expires_at": expires_at,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql), params)
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: upsert_refresh_token_failed user_id=%s", user_id)
            raise InternalError() from exc

    def delete_refresh_token(self, *, user_id: int) -> None:
        sql = """
            DELETE FROM public.refresh_tokens
            WHERE user_id = :user_id
        """
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql), {"user_id": user_id})
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: delete_refresh_token_failed user_id=%s", user_id)
            raise InternalError() from exc

    def get_refresh_token_record(self, *, user_id: int) -> RefreshTokenRecord:
        sql = """
            SELECT user_id, token_id, expires_at
            FROM public.refresh_tokens
            WHERE user_id = :user_id
            LIMIT 1
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: get_refresh_token_failed user_id=%s", user_id)
            raise InternalError() from exc
        if row is None:
            raise RefreshTokenNotFoundError("Refresh token not found; the session was signed out.")
        return map_row_to_refresh_token_record(row)

    def append_login_history(self, *, user_id: int, ip_address: str) -> LoginHistoryEntry:
        sql = """
            INSERT INTO public.login_history (user_id, ip_address)
            VALUES (:user_id, :ip_address)
            RETURNING id, user_id, ip_address, logged_at
        """
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), {"user_id": user_id, "ip_address": ip_address}).mappings().one()
        except SQLAlchemyError as exc:
            logger.exception("accounts_repository: append_login_history_failed user_id=%s", user_id)
            raise InternalError() from exc
        return map_row_to_login_history_entry(row)
