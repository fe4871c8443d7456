from __future__ import annotations

from app.application.dto.auth import AuthTokensOutput, RefreshSessionInput
from app.application.ports.auth_port import AuthPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import RefreshSessionInvalidError

from .auth_common import issue_tokens, utcnow


class RefreshSessionUseCase:
    def __init__(self, *, auth_port: AuthPort, token_port: TokenPort):
        self._auth_port = auth_port
        self._token_port = token_port

    def execute(self, command: RefreshSessionInput) -> AuthTokensOutput:
        token = command.refresh_token.strip()
        if not token:
            raise RefreshSessionInvalidError("Missing refresh token.")

        def _tx(auth_port: AuthPort) -> AuthTokensOutput:
            now = utcnow()
            record = auth_port.get_refresh_token(token_id=token)
            if record is None:
                raise RefreshSessionInvalidError("Invalid refresh session.")
            if record.is_revoked:
                raise RefreshSessionInvalidError("Refresh session already revoked.")
            if record.expires_at <= now:
                raise RefreshSessionInvalidError("Refresh session expired.")

            user = auth_port.get_user_by_id(user_id=record.user_id)
            if user is None:
                raise RefreshSessionInvalidError("User not found for refresh session.")

            # A concurrent refresh of the same token loses here.
            if auth_port.revoke_refresh_token(token_id=record.token_id) == 0:
                raise RefreshSessionInvalidError("Refresh session already revoked.")
            return issue_tokens(user=user, auth_port=auth_port, token_port=self._token_port)

        return self._auth_port.execute_in_transaction(_tx)
