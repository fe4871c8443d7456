from __future__ import annotations

from app.application.dto.auth import MessageOutput
from app.application.ports.auth_port import AuthPort
from app.application.ports.email_sender_port import EmailSenderPort
from app.application.ports.token_port import TokenPort

from .account_emails import AccountEmailComposer
from .auth_common import PASSWORD_RESET_TTL, normalize_email, send_email_quietly, utcnow


PASSWORD_RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."


class RequestPasswordResetUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        token_port: TokenPort,
        email_sender: EmailSenderPort,
        email_composer: AccountEmailComposer,
    ):
        self._auth_port = auth_port
        self._token_port = token_port
        self._email_sender = email_sender
        self._email_composer = email_composer

    def execute(self, *, email: str) -> MessageOutput:
        user = self._auth_port.get_user_by_email(email=normalize_email(email))
        if user is None:
            return MessageOutput(message=PASSWORD_RESET_REQUESTED_MESSAGE)

        now = utcnow()
        token = self._token_port.generate_one_time_token()
        self._auth_port.set_password_reset_token(
            user_id=user.id,
            token=token,
            expires_at=now + PASSWORD_RESET_TTL,
            now=now,
        )
        message = self._email_composer.password_reset(name=user.full_name or user.email, token=token)
        send_email_quietly(self._email_sender, to=user.email, subject=message.subject, body=message.body)
        return MessageOutput(message=PASSWORD_RESET_REQUESTED_MESSAGE)
