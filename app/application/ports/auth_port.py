from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Protocol, TypeVar

from app.application.ports.refresh_token_port import RefreshTokenPort
from app.domain.entities.user import Role, User


TAuthResult = TypeVar("TAuthResult")


class AuthPort(RefreshTokenPort, Protocol):
    def execute_in_transaction(self, fn: Callable[[AuthPort], TAuthResult]) -> TAuthResult:
        ...

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def get_user_by_google_id(self, *, google_id: str) -> User | None:
        ...

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
    ) -> User:
        """Raises EmailAlreadyExistsError or AccountConflictError on unique violations."""
        ...

    def link_google_id(self, *, user_id: str, google_id: str, now: datetime) -> User:
        """Sets google_id, marks the email verified and clears the verification token."""
        ...

    def mark_email_verified(self, *, user_id: str, now: datetime) -> User:
        ...

    def set_email_verification_token(
        self,
        *,
        user_id: str,
        token: str,
        expires_at: datetime,
        now: datetime,
    ) -> None:
        ...

    def consume_email_verification_token(self, *, token: str, now: datetime) -> User | None:
        """Verifies the owner of an unexpired token and clears it, atomically."""
        ...

    def set_password_reset_token(
        self,
        *,
        user_id: str,
        token: str,
        expires_at: datetime,
        now: datetime,
    ) -> None:
        ...

    def get_user_by_password_reset_token(self, *, token: str, now: datetime) -> User | None:
        ...

    def consume_password_reset_token(
        self,
        *,
        token: str,
        password_hash: str,
        now: datetime,
    ) -> User | None:
        """Stores password_hash for the owner of an unexpired token and clears it, atomically."""
        ...

    def update_password_hash(self, *, user_id: str, password_hash: str, now: datetime) -> None:
        ...

    def update_profile_columns(
        self,
        *,
        user_id: str,
        values: Mapping[str, Any],
        now: datetime,
    ) -> User | None:
        ...
