from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.application.dto.auth import AccessTokenClaims
from app.domain.entities.user import Role


class TokenPort(Protocol):
    def create_access_token(
        self,
        *,
        user_id: str,
        email: str,
        role: Role,
        now: datetime,
    ) -> tuple[str, datetime]:
        ...

    def decode_access_token(self, *, token: str) -> AccessTokenClaims:
        ...

    def generate_refresh_token(self) -> str:
        ...

    def refresh_token_expires_at(self, *, now: datetime) -> datetime:
        ...

    def generate_one_time_token(self) -> str:
        ...
