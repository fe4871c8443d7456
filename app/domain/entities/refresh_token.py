from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RefreshToken:
    token_id: str
    user_id: str
    expires_at: datetime
    is_revoked: bool
    created_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return not self.is_revoked and self.expires_at > now
