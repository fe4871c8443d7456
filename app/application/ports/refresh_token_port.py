from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.domain.entities.refresh_token import RefreshToken


class RefreshTokenPort(Protocol):
    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> RefreshToken:
        """Raises DuplicateRefreshTokenIdError when token_id already exists."""
        ...

    def get_refresh_token(self, *, token_id: str) -> RefreshToken | None:
        ...

    def revoke_refresh_token(self, *, token_id: str) -> int:
        """Returns the number of records that changed."""
        ...

    def revoke_all_refresh_tokens_for_user(self, *, user_id: str) -> int:
        ...
