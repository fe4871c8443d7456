from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import pytest

from app.application.dto.auth import AccessTokenClaims, GoogleIdentityInfo
from app.application.use_cases.account_emails import AccountEmailComposer
from app.domain.entities.refresh_token import RefreshToken
from app.domain.entities.user import Role, User
from app.domain.exceptions import (
    AccountConflictError,
    DuplicateRefreshTokenIdError,
    EmailAlreadyExistsError,
    EmailDeliveryError,
    GoogleTokenValidationError,
    UserNotFoundError,
)
from app.infrastructure.security.token_service import JwtTokenService


TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


def make_user(**overrides: Any) -> User:
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "id": "user-1",
        "email": "user@example.com",
        "password_hash": "hashed::correct-password",
        "full_name": "Test User",
        "phone_number": "+201000000000",
        "role": Role.CUSTOMER,
        "is_verified": True,
        "google_id": None,
        "profile_picture_url": None,
        "email_verification_token": None,
        "email_verification_token_expires_at": None,
        "password_reset_token": None,
        "password_reset_token_expires_at": None,
        "restaurant_name": None,
        "restaurant_address": None,
        "vehicle_type": None,
        "license_plate": None,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return User(**values)


class InMemoryAuthPort:
    """Dict-backed AuthPort; uniqueness and single-use updates are checked under one lock."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.refresh_tokens: dict[str, RefreshToken] = {}
        self.transactions = 0
        self._lock = threading.RLock()

    def add_user(self, user: User) -> User:
        with self._lock:
            self.users[user.id] = user
        return user

    def execute_in_transaction(self, fn: Callable[["InMemoryAuthPort"], Any]) -> Any:
        with self._lock:
            self.transactions += 1
            return fn(self)

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_email(self, *, email: str) -> User | None:
        email_l = email.lower()
        for user in list(self.users.values()):
            if user.email.lower() == email_l:
                return user
        return None

    def get_user_by_google_id(self, *, google_id: str) -> User | None:
        for user in list(self.users.values()):
            if user.google_id == google_id:
                return user
        return None

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
        with self._lock:
            if google_id and self.get_user_by_google_id(google_id=google_id) is not None:
                raise AccountConflictError("This Google account is already linked to another user.")
            if self.get_user_by_email(email=email) is not None:
                raise EmailAlreadyExistsError("User with this email already exists.")
            user = make_user(
                id=user_id,
                email=email,
                password_hash=password_hash,
                full_name=full_name,
                phone_number=phone_number,
                role=role,
                is_verified=is_verified,
                google_id=google_id,
                email_verification_token=email_verification_token,
                email_verification_token_expires_at=email_verification_token_expires_at,
                created_at=now,
                updated_at=now,
            )
            self.users[user.id] = user
            return user

    def _update(self, user_id: str, **changes: Any) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError("User not found.")
        updated = replace(user, **changes)
        self.users[user_id] = updated
        return updated

    def link_google_id(self, *, user_id: str, google_id: str, now: datetime) -> User:
        with self._lock:
            if self.get_user_by_google_id(google_id=google_id) is not None:
                raise AccountConflictError("This Google account is already linked to another user.")
            if self.users[user_id].google_id:
                raise AccountConflictError("An account with this email is already linked to a different social account.")
            return self._update(
                user_id,
                google_id=google_id,
                is_verified=True,
                email_verification_token=None,
                email_verification_token_expires_at=None,
                updated_at=now,
            )

    def mark_email_verified(self, *, user_id: str, now: datetime) -> User:
        with self._lock:
            return self._update(
                user_id,
                is_verified=True,
                email_verification_token=None,
                email_verification_token_expires_at=None,
                updated_at=now,
            )

    def set_email_verification_token(self, *, user_id: str, token: str, expires_at: datetime, now: datetime) -> None:
        with self._lock:
            self._update(
                user_id,
                email_verification_token=token,
                email_verification_token_expires_at=expires_at,
                updated_at=now,
            )

    def consume_email_verification_token(self, *, token: str, now: datetime) -> User | None:
        with self._lock:
            for user in self.users.values():
                if (
                    user.email_verification_token == token
                    and user.email_verification_token_expires_at is not None
                    and user.email_verification_token_expires_at > now
                ):
                    return self._update(
                        user.id,
                        is_verified=True,
                        email_verification_token=None,
                        email_verification_token_expires_at=None,
                        updated_at=now,
                    )
            return None

    def set_password_reset_token(self, *, user_id: str, token: str, expires_at: datetime, now: datetime) -> None:
        with self._lock:
            self._update(
                user_id,
                password_reset_token=token,
                password_reset_token_expires_at=expires_at,
                updated_at=now,
            )

    def get_user_by_password_reset_token(self, *, token: str, now: datetime) -> User | None:
        for user in list(self.users.values()):
            if (
                user.password_reset_token == token
                and user.password_reset_token_expires_at is not None
                and user.password_reset_token_expires_at > now
            ):
                return user
        return None

    def consume_password_reset_token(self, *, token: str, password_hash: str, now: datetime) -> User | None:
        with self._lock:
            user = self.get_user_by_password_reset_token(token=token, now=now)
            if user is None:
                return None
            return self._update(
                user.id,
                password_hash=password_hash,
                password_reset_token=None,
                password_reset_token_expires_at=None,
                updated_at=now,
            )

    def update_password_hash(self, *, user_id: str, password_hash: str, now: datetime) -> None:
        with self._lock:
            self._update(user_id, password_hash=password_hash, updated_at=now)

    def update_profile_columns(self, *, user_id: str, values: Mapping[str, Any], now: datetime) -> User | None:
        with self._lock:
            if user_id not in self.users:
                return None
            return self._update(user_id, **dict(values), updated_at=now)

    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> RefreshToken:
        with self._lock:
            if token_id in self.refresh_tokens:
                raise DuplicateRefreshTokenIdError("Refresh token id already exists.")
            record = RefreshToken(
                token_id=token_id,
                user_id=user_id,
                expires_at=expires_at,
                is_revoked=False,
                created_at=created_at,
            )
            self.refresh_tokens[token_id] = record
            return record

    def get_refresh_token(self, *, token_id: str) -> RefreshToken | None:
        return self.refresh_tokens.get(token_id)

    def revoke_refresh_token(self, *, token_id: str) -> int:
        with self._lock:
            record = self.refresh_tokens.get(token_id)
            if record is None or record.is_revoked:
                return 0
            self.refresh_tokens[token_id] = replace(record, is_revoked=True)
            return 1

    def revoke_all_refresh_tokens_for_user(self, *, user_id: str) -> int:
        with self._lock:
            revoked = 0
            for token_id, record in list(self.refresh_tokens.items()):
                if record.user_id == user_id and not record.is_revoked:
                    self.refresh_tokens[token_id] = replace(record, is_revoked=True)
                    revoked += 1
            return revoked

    def active_refresh_tokens(self, user_id: str) -> list[RefreshToken]:
        return [r for r in self.refresh_tokens.values() if r.user_id == user_id and not r.is_revoked]


class FakePasswordHasher:
    def hash(self, plain_password: str) -> str:
        return f"hashed::{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return password_hash == f"hashed::{plain_password}"

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        if password_hash == f"legacy::{plain_password}":
            return True, self.hash(plain_password)
        return self.verify(plain_password, password_hash), None


class FakeTokenPort:
    def __init__(self):
        self._counter = 0
        self._lock = threading.Lock()

    def _next(self) -> int:
        with self._lock:
            self._counter += 1
            return self._counter

    def create_access_token(self, *, user_id: str, email: str, role: Role, now: datetime) -> tuple[str, datetime]:
        return f"access-{user_id}-{self._next()}", now + timedelta(minutes=60)

    def decode_access_token(self, *, token: str) -> AccessTokenClaims:
        raise NotImplementedError

    def generate_refresh_token(self) -> str:
        return f"refresh-{self._next()}"

    def refresh_token_expires_at(self, *, now: datetime) -> datetime:
        return now + timedelta(days=7)

    def generate_one_time_token(self) -> str:
        return f"ott-{self._next()}"


class RecordedEmail:
    def __init__(self, *, to: str, subject: str, body: str):
        self.to = to
        self.subject = subject
        self.body = body


class RecordingEmailSender:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent: list[RecordedEmail] = []

    def send(self, *, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailDeliveryError("SMTP delivery failed: SMTPServerDisconnected")
        self.sent.append(RecordedEmail(to=to, subject=subject, body=body))

    def last_token(self) -> str:
        body = self.sent[-1].body
        return body.split("token=", 1)[1].split()[0]


class FakeGoogleOauthPort:
    def __init__(self):
        self.identities: dict[str, GoogleIdentityInfo] = {}

    def register(
        self,
        id_token: str,
        *,
        subject: str,
        email: str,
        email_verified: bool = True,
        name: str | None = "Google User",
    ) -> None:
        self.identities[id_token] = GoogleIdentityInfo(
            subject=subject,
            email=email,
            email_verified=email_verified,
            name=name,
        )

    def verify_id_token(self, *, id_token: str) -> GoogleIdentityInfo:
        identity = self.identities.get(id_token)
        if identity is None:
            raise GoogleTokenValidationError("Google authentication failed: Invalid token or network issue.")
        return identity


@pytest.fixture
def auth_port() -> InMemoryAuthPort:
    return InMemoryAuthPort()


@pytest.fixture
def password_hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def token_port() -> FakeTokenPort:
    return FakeTokenPort()


@pytest.fixture
def jwt_service() -> JwtTokenService:
    return JwtTokenService(jwt_secret=TEST_JWT_SECRET, access_ttl_minutes=60, refresh_ttl_days=7)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def email_composer() -> AccountEmailComposer:
    return AccountEmailComposer(public_base_url="https://api.example.com/")


@pytest.fixture
def google_oauth() -> FakeGoogleOauthPort:
    return FakeGoogleOauthPort()
