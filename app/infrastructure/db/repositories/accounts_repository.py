from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Mapping, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from app.application.ports.auth_port import AuthPort
from app.domain.entities.user import Role
from app.domain.exceptions import (
    AccountConflictError,
    DuplicateRefreshTokenIdError,
    EmailAlreadyExistsError,
    UserNotFoundError,
)
from app.infrastructure.db.mappers.accounts_mapper import map_row_to_refresh_token, map_row_to_user


TResult = TypeVar("TResult")

USER_COLUMNS = """
    id, email, password_hash, full_name, phone_number, role, is_verified, google_id,
    profile_picture_url, email_verification_token, email_verification_token_expires_at,
    password_reset_token, password_reset_token_expires_at, restaurant_name,
    restaurant_address, vehicle_type, license_plate, created_at, updated_at
"""

REFRESH_TOKEN_COLUMNS = "token_id, user_id, expires_at, is_revoked, created_at"

UPDATABLE_PROFILE_COLUMNS = frozenset(
    {
        "full_name",
        "phone_number",
        "profile_picture_url",
        "restaurant_name",
        "restaurant_address",
        "vehicle_type",
        "license_plate",
    }
)


def _constraint_name(exc: IntegrityError) -> str:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    return name or str(exc.orig)


class SqlAccountsRepository(AuthPort):
    def __init__(self, engine: Engine, *, connection: Connection | None = None):
        self._engine = engine
        self._connection = connection

    @contextmanager
    def _begin(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def _insert_scope(self) -> Iterator[Connection]:
        # Inside an outer transaction a failed insert must not poison it.
        if self._connection is not None:
            with self._connection.begin_nested():
                yield self._connection
            return
        with self._engine.begin() as conn:
            yield conn

    def execute_in_transaction(self, fn: Callable[[AuthPort], TResult]) -> TResult:
        if self._connection is not None:
            return fn(self)
        with self._engine.begin() as conn:
            return fn(SqlAccountsRepository(self._engine, connection=conn))

    def _fetch_user(self, sql: str, params: Mapping[str, Any]):
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        return self._fetch_user(sql, {"user_id": user_id})

    def get_user_by_email(self, *, email: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        return self._fetch_user(sql, {"email": email.lower()})

    def get_user_by_google_id(self, *, google_id: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE google_id = :google_id
            LIMIT 1
        """
        return self._fetch_user(sql, {"google_id": google_id})

    def create_user(
        self,
        *,
        user_id: str,
        email: str,
        password_hash: str | None,
        full_name: str,
        phone_number: str | None,
        role: Role,
        is_verified: bool,
        google_id: str | None,
        email_verification_token: str | None,
        email_verification_token_expires_at: datetime | None,
        now: datetime,
    ):
        sql = f"""
            INSERT INTO public.users (
                id, email, password_hash, full_name, phone_number, role, is_verified, google_id,
                email_verification_token, email_verification_token_expires_at, created_at, updated_at
            ) VALUES (
                :id, :email, :password_hash, :full_name, :phone_number, :role, :is_verified, :google_id,
                :email_verification_token, :email_verification_token_expires_at, :now, :now
            )
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "email": email,
            "password_hash": password_hash,
            "full_name": full_name,
            "phone_number": phone_number,
            "role": role.value,
            "is_verified": is_verified,
            "google_id": google_id,
            "email_verification_token": email_verification_token,
            "email_verification_token_expires_at": email_verification_token_expires_at,
            "now": now,
        }
        try:
            with self._insert_scope() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            if "google_id" in _constraint_name(exc):
                raise AccountConflictError("This Google account is already linked to another user.") from exc
            if "email" in _constraint_name(exc):
                raise EmailAlreadyExistsError("User with this email already exists.") from exc
            raise
        return map_row_to_user(row)

    def _update_user_returning(self, sql: str, params: Mapping[str, Any]):
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def link_google_id(self, *, user_id: str, google_id: str, now: datetime):
        sql = f"""
            UPDATE public.users
            SET google_id = :google_id,
                is_verified = true,
                email_verification_token = NULL,
                email_verification_token_expires_at = NULL,
                updated_at = :now
            WHERE id = :user_id
              AND google_id IS NULL
            RETURNING {USER_COLUMNS}
        """
        try:
            user = self._update_user_returning(sql, {"user_id": user_id, "google_id": google_id, "now": now})
        except IntegrityError as exc:
            raise AccountConflictError("This Google account is already linked to another user.") from exc
        if user is None:
            raise AccountConflictError("An account with this email is already linked to a different social account.")
        return user

    def mark_email_verified(self, *, user_id: str, now: datetime):
        sql = f"""
            UPDATE public.users
            SET is_verified = true,
                email_verification_token = NULL,
                email_verification_token_expires_at = NULL,
                updated_at = :now
            WHERE id = :user_id
            RETURNING {USER_COLUMNS}
        """
        user = self._update_user_returning(sql, {"user_id": user_id, "now": now})
        if user is None:
            raise UserNotFoundError("User not found.")
        return user

    def set_email_verification_token(
        self,
        *,
        user_id: str,
        token: str,
        expires_at: datetime,
        now: datetime,
    ) -> None:
        sql = """
            UPDATE public.users
            SET email_verification_token = :token,
                email_verification_token_expires_at = :expires_at,
                updated_at = :now
            WHERE id = :user_id
        """
        with self._begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "token": token, "expires_at": expires_at, "now": now})

    def consume_email_verification_token(self, *, token: str, now: datetime):
        sql = f"""
            UPDATE public.users
            SET is_verified = true,
                email_verification_token = NULL,
                email_verification_token_expires_at = NULL,
                updated_at = :now
            WHERE email_verification_token = :token
              AND email_verification_token_expires_at > :now
            RETURNING {USER_COLUMNS}
        """
        return self._update_user_returning(sql, {"token": token, "now": now})

    def set_password_reset_token(
        self,
        *,
        user_id: str,
        token: str,
        expires_at: datetime,
        now: datetime,
    ) -> None:
        sql = """
            UPDATE public.users
            SET password_reset_token = :token,
                password_reset_token_expires_at = :expires_at,
                updated_at = :now
            WHERE id = :user_id
        """
        with self._begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "token": token, "expires_at": expires_at, "now": now})

    def get_user_by_password_reset_token(self, *, token: str, now: datetime):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE password_reset_token = :token
              AND password_reset_token_expires_at > :now
            LIMIT 1
        """
        return self._fetch_user(sql, {"token": token, "now": now})

    def consume_password_reset_token(self, *, token: str, password_hash: str, now: datetime):
        sql = f"""
            UPDATE public.users
            SET password_hash = :password_hash,
                password_reset_token = NULL,
                password_reset_token_expires_at = NULL,
                updated_at = :now
            WHERE password_reset_token = :token
              AND password_reset_token_expires_at > :now
            RETURNING {USER_COLUMNS}
        """
        return self._update_user_returning(sql, {"token": token, "password_hash": password_hash, "now": now})

    def update_password_hash(self, *, user_id: str, password_hash: str, now: datetime) -> None:
        sql = """
            UPDATE public.users
            SET password_hash = :password_hash,
                updated_at = :now
            WHERE id = :user_id
        """
        with self._begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "password_hash": password_hash, "now": now})

    def update_profile_columns(self, *, user_id: str, values: Mapping[str, Any], now: datetime):
        unknown = set(values) - UPDATABLE_PROFILE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {', '.join(sorted(unknown))}.")
        assignments = ",\n                ".join(f"{column} = :{column}" for column in sorted(values))
        sql = f"""
            UPDATE public.users
            SET {assignments},
                updated_at = :now
            WHERE id = :user_id
            RETURNING {USER_COLUMNS}
        """
        return self._update_user_returning(sql, {**values, "user_id": user_id, "now": now})

    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        expires_at: datetime,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO public.refresh_tokens (token_id, user_id, expires_at, is_revoked, created_at)
            VALUES (:token_id, :user_id, :expires_at, false, :created_at)
            RETURNING {REFRESH_TOKEN_COLUMNS}
        """
        params = {
            "token_id": token_id,
            "user_id": user_id,
            "expires_at": expires_at,
            "created_at": created_at,
        }
        try:
            with self._insert_scope() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            if "pkey" in _constraint_name(exc) or "token_id" in _constraint_name(exc):
                raise DuplicateRefreshTokenIdError("Refresh token id already exists.") from exc
            raise
        return map_row_to_refresh_token(row)

    def get_refresh_token(self, *, token_id: str):
        sql = f"""
            SELECT {REFRESH_TOKEN_COLUMNS}
            FROM public.refresh_tokens
            WHERE token_id = :token_id
            LIMIT 1
        """
        with self._begin() as conn:
            row = conn.execute(text(sql), {"token_id": token_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_refresh_token(row)

    def revoke_refresh_token(self, *, token_id: str) -> int:
        sql = """
            UPDATE public.refresh_tokens
            SET is_revoked = true
            WHERE token_id = :token_id
              AND is_revoked = false
        """
        with self._begin() as conn:
            result = conn.execute(text(sql), {"token_id": token_id})
        return result.rowcount

    def revoke_all_refresh_tokens_for_user(self, *, user_id: str) -> int:
        sql = """
            UPDATE public.refresh_tokens
            SET is_revoked = true
            WHERE user_id = :user_id
              AND is_revoked = false
        """
        with self._begin() as conn:
            result = conn.execute(text(sql), {"user_id": user_id})
        return result.rowcount
