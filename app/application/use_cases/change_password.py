from __future__ import annotations

from app.application.dto.auth import ChangePasswordInput, MessageOutput
from app.application.ports.auth_port import AuthPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.domain.exceptions import InvalidCredentialsError, SocialOnlyAccountError, UserNotFoundError

from .auth_common import utcnow, validate_password


class ChangePasswordUseCase:
    def __init__(self, *, auth_port: AuthPort, password_hasher: PasswordHasherPort):
        self._auth_port = auth_port
        self._password_hasher = password_hasher

    def execute(self, command: ChangePasswordInput) -> MessageOutput:
        validate_password(command.new_password)
        user = self._auth_port.get_user_by_id(user_id=command.user_id)
        if user is None:
            raise UserNotFoundError("User not found.")
        if not user.password_hash:
            raise SocialOnlyAccountError("This account has no password. Use password reset to set one.")
        if not self._password_hasher.verify(command.current_password, user.password_hash):
            raise InvalidCredentialsError("Incorrect current password.")

        password_hash = self._password_hasher.hash(command.new_password)

        def _tx(auth_port: AuthPort) -> None:
            auth_port.update_password_hash(user_id=user.id, password_hash=password_hash, now=utcnow())
            auth_port.revoke_all_refresh_tokens_for_user(user_id=user.id)

        self._auth_port.execute_in_transaction(_tx)
        return MessageOutput(message="Password updated successfully.")
