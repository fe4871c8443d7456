from __future__ import annotations

from uuid import uuid4

from app.application.dto.auth import RegisterUserInput, RegisterUserOutput
from app.application.ports.auth_port import AuthPort
from app.application.ports.email_sender_port import EmailSenderPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import Role
from app.domain.exceptions import InvalidInputError

from .account_emails import AccountEmailComposer
from .auth_common import (
    EMAIL_VERIFICATION_TTL,
    build_auth_user_output,
    normalize_email,
    send_email_quietly,
    utcnow,
    validate_password,
)


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        email_sender: EmailSenderPort,
        email_composer: AccountEmailComposer,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._email_sender = email_sender
        self._email_composer = email_composer

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        email = normalize_email(command.email)
        full_name = command.full_name.strip()
        phone_number = command.phone_number.strip()
        password = command.password

        if not email or not full_name or not phone_number or not password:
            raise InvalidInputError("All required fields must be provided for registration.")
        validate_password(password)

        password_hash = self._password_hasher.hash(password)
        verification_token = self._token_port.generate_one_time_token()
        now = utcnow()

        # Uniqueness is enforced by the users.email index; a losing concurrent
        # insert surfaces as EmailAlreadyExistsError from the repository.
        user = self._auth_port.create_user(
            user_id=str(uuid4()),
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            phone_number=phone_number,
            role=Role.CUSTOMER,
            is_verified=False,
            google_id=None,
            email_verification_token=verification_token,
            email_verification_token_expires_at=now + EMAIL_VERIFICATION_TTL,
            now=now,
        )

        message = self._email_composer.verification(name=user.full_name or user.email, token=verification_token)
        send_email_quietly(self._email_sender, to=user.email, subject=message.subject, body=message.body)

        return RegisterUserOutput(user=build_auth_user_output(user))
