from __future__ import annotations

import logging
from uuid import uuid4

from app.application.dto.auth import AuthTokensOutput, LoginGoogleInput
from app.application.ports.auth_port import AuthPort
from app.application.ports.google_oauth_port import GoogleOauthPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import Role, User
from app.domain.exceptions import AccountConflictError

from .auth_common import issue_tokens, normalize_email, redact_email, utcnow


logger = logging.getLogger(__name__)


class LoginGoogleUseCase:
    """Resolves a Google identity to a user: by google id, then by email, else a new account."""

    def __init__(
        self,
        *,
        auth_port: AuthPort,
        google_oauth_port: GoogleOauthPort,
        token_port: TokenPort,
    ):
        self._auth_port = auth_port
        self._google_oauth_port = google_oauth_port
        self._token_port = token_port

    def execute(self, command: LoginGoogleInput) -> AuthTokensOutput:
        google_identity = self._google_oauth_port.verify_id_token(id_token=command.id_token)
        email = normalize_email(google_identity.email)
        now = utcnow()

        user = self._auth_port.get_user_by_google_id(google_id=google_identity.subject)
        if user is not None:
            if not user.is_verified:
                user = self._auth_port.mark_email_verified(user_id=user.id, now=now)
        else:
            user = self._auth_port.get_user_by_email(email=email)
            if user is not None:
                user = self._link_existing(user, google_id=google_identity.subject, email_verified=google_identity.email_verified)
            else:
                full_name = google_identity.name.strip() if google_identity.name else email
                user = self._auth_port.create_user(
                    user_id=str(uuid4()),
                    email=email,
                    password_hash=None,
                    full_name=full_name,
                    phone_number=None,
                    role=Role.CUSTOMER,
                    is_verified=True,
                    google_id=google_identity.subject,
                    email_verification_token=None,
                    email_verification_token_expires_at=None,
                    now=now,
                )
                logger.info("Created Google account for %s.", redact_email(email))

        return issue_tokens(user=user, auth_port=self._auth_port, token_port=self._token_port)

    def _link_existing(self, user: User, *, google_id: str, email_verified: bool) -> User:
        if user.google_id:
            raise AccountConflictError(
                "An account with this email is already linked to a different social account."
            )
        if not user.password_hash:
            raise AccountConflictError("An account with this email cannot be linked automatically.")
        # Only a provider-verified email may take over an existing password account.
        if not email_verified:
            raise AccountConflictError(
                "An account with this email already exists. Please log in with your password."
            )
        logger.info("Linking Google identity to existing account %s.", user.id)
        return self._auth_port.link_google_id(user_id=user.id, google_id=google_id, now=utcnow())
