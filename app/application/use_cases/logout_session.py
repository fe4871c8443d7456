from __future__ import annotations

import logging

from app.application.dto.auth import LogoutInput
from app.application.ports.refresh_token_port import RefreshTokenPort


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    def __init__(self, *, refresh_token_port: RefreshTokenPort):
        self._refresh_token_port = refresh_token_port

    def execute(self, command: LogoutInput) -> bool:
        token = command.refresh_token.strip()
        if not token:
            return False
        revoked = self._refresh_token_port.revoke_refresh_token(token_id=token)
        if revoked == 0:
            logger.info("Logout matched no active refresh token.")
        return revoked > 0
