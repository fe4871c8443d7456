from __future__ import annotations

from app.application.dto.auth import AuthUserOutput
from app.application.ports.auth_port import AuthPort
from app.domain.exceptions import InvalidOrExpiredTokenError

from .auth_common import build_auth_user_output, utcnow


class VerifyEmailUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, *, token: str) -> AuthUserOutput:
        token = token.strip()
        if not token:
            raise InvalidOrExpiredTokenError("Invalid or expired verification link.")
        user = self._auth_port.consume_email_verification_token(token=token, now=utcnow())
        if user is None:
            raise InvalidOrExpiredTokenError("Invalid or expired verification link.")
        return build_auth_user_output(user)
