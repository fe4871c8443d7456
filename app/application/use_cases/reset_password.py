from __future__ import annotations

import logging

from app.application.dto.auth import MessageOutput, ResetPasswordInput
from app.application.ports.auth_port import AuthPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.domain.exceptions import InvalidOrExpiredTokenError

from .auth_common import utcnow, validate_password


logger = logging.getLogger(__name__)

PASSWORD_RESET_DONE_MESSAGE = "Your password has been successfully reset."


class ValidateResetTokenUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, *, token: str) -> None:
        token = token.strip()
        if not token or self._auth_port.get_user_by_password_reset_token(token=token, now=utcnow()) is None:
            raise InvalidOrExpiredTokenError("Invalid or expired password reset token.")


class ResetPasswordUseCase:
    def __init__(self, *, auth_port: AuthPort, password_hasher: PasswordHasherPort):
        self._auth_port = auth_port
        self._password_hasher = password_hasher

    def execute(self, command: ResetPasswordInput) -> MessageOutput:
        token = command.token.strip()
        if not token or self._auth_port.get_user_by_password_reset_token(token=token, now=utcnow()) is None:
            raise InvalidOrExpiredTokenError("Invalid or expired password reset link.")
        validate_password(command.new_password)
        password_hash = self._password_hasher.hash(command.new_password)

        def _tx(auth_port: AuthPort) -> int:
            user = auth_port.consume_password_reset_token(token=token, password_hash=password_hash, now=utcnow())
            if user is None:
                raise InvalidOrExpiredTokenError("Invalid or expired password reset link.")
            return auth_port.revoke_all_refresh_tokens_for_user(user_id=user.id)

        revoked = self._auth_port.execute_in_transaction(_tx)
        logger.info("Password reset completed; %s refresh token(s) revoked.", revoked)
        return MessageOutput(message=PASSWORD_RESET_DONE_MESSAGE)
