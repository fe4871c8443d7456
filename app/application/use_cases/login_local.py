from __future__ import annotations

import logging

from app.application.dto.auth import AuthTokensOutput, LoginLocalInput
from app.application.ports.auth_port import AuthPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import (
    EmailNotVerifiedError,
    InvalidCredentialsError,
    SocialOnlyAccountError,
)

from .auth_common import issue_tokens, normalize_email, utcnow


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid Email or Password."


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher
        self._token_port = token_port

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        email = normalize_email(command.email)
        user = self._auth_port.get_user_by_email(email=email)
        if user is None:
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not user.password_hash:
            raise SocialOnlyAccountError("This account uses Google sign-in. Please continue with Google.")

        verified, replacement_hash = self._password_hasher.verify_and_update(
            command.password,
            user.password_hash,
        )
        if not verified:
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not user.is_verified:
            raise EmailNotVerifiedError(
                "Please verify your email address to log in. Check your inbox for a verification link."
            )

        if replacement_hash:
            logger.info("Upgrading password hash for user %s.", user.id)
            self._auth_port.update_password_hash(user_id=user.id, password_hash=replacement_hash, now=utcnow())

        return issue_tokens(user=user, auth_port=self._auth_port, token_port=self._token_port)
