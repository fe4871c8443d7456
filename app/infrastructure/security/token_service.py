from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta, timezone

import jwt

from app.application.dto.auth import AccessTokenClaims
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import Role
from app.domain.exceptions import ExpiredTokenError, InvalidTokenError


ONE_TIME_TOKEN_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
ONE_TIME_TOKEN_LENGTH = 32


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        jwt_secret: str,
        access_ttl_minutes: int = 60,
        refresh_ttl_days: int = 7,
    ):
        self._jwt_secret = jwt_secret
        self._access_ttl_minutes = access_ttl_minutes
        self._refresh_ttl_days = refresh_ttl_days

    def create_access_token(
        self,
        *,
        user_id: str,
        email: str,
        role: Role,
        now: datetime,
    ) -> tuple[str, datetime]:
        exp = now + timedelta(minutes=self._access_ttl_minutes)
        payload = {
            "sub": user_id,
            "email": email,
            "role": role.value,
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        token = jwt.encode(payload, self._jwt_secret, algorithm="HS256")
        return token, exp

    def decode_access_token(self, *, token: str) -> AccessTokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=["HS256"],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token expired.") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Invalid token.") from exc

        if payload.get("type") != "access":
            raise InvalidTokenError("Invalid token type.")

        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidTokenError("Invalid token subject.")
        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise InvalidTokenError("Invalid token role.") from exc

        return AccessTokenClaims(
            user_id=user_id,
            email=email,
            role=role,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def generate_refresh_token(self) -> str:
        return secrets.token_urlsafe(48)

    def refresh_token_expires_at(self, *, now: datetime) -> datetime:
        return now + timedelta(days=self._refresh_ttl_days)

    def generate_one_time_token(self) -> str:
        return "".join(secrets.choice(ONE_TIME_TOKEN_ALPHABET) for _ in range(ONE_TIME_TOKEN_LENGTH))
