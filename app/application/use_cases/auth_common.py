from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from app.application.dto.auth import AuthTokensOutput, AuthUserOutput
from app.application.ports.auth_port import AuthPort
from app.application.ports.email_sender_port import EmailSenderPort
from app.application.ports.refresh_token_port import RefreshTokenPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import User
from app.domain.exceptions import DuplicateRefreshTokenIdError, EmailDeliveryError, InvalidInputError


logger = logging.getLogger(__name__)

EMAIL_VERIFICATION_TTL = timedelta(hours=24)
PASSWORD_RESET_TTL = timedelta(hours=1)
MIN_PASSWORD_LENGTH = 8
REFRESH_TOKEN_ID_ATTEMPTS = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"password must have at least {MIN_PASSWORD_LENGTH} characters.")


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone_number=user.phone_number,
        role=user.role,
        is_verified=user.is_verified,
        profile_picture_url=user.profile_picture_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def issue_refresh_token(
    *,
    user_id: str,
    refresh_token_port: RefreshTokenPort,
    token_port: TokenPort,
    now: datetime,
) -> tuple[str, datetime]:
    expires_at = token_port.refresh_token_expires_at(now=now)
    for attempt in range(1, REFRESH_TOKEN_ID_ATTEMPTS + 1):
        token_id = token_port.generate_refresh_token()
        try:
            refresh_token_port.create_refresh_token(
                token_id=token_id,
                user_id=user_id,
                expires_at=expires_at,
                created_at=now,
            )
        except DuplicateRefreshTokenIdError:
            logger.warning("Refresh token id collision (attempt %s/%s).", attempt, REFRESH_TOKEN_ID_ATTEMPTS)
            continue
        return token_id, expires_at
    raise DuplicateRefreshTokenIdError("Could not allocate a unique refresh token id.")


def issue_tokens(
    *,
    user: User,
    auth_port: AuthPort,
    token_port: TokenPort,
) -> AuthTokensOutput:
    now = utcnow()
    access_token, access_expires_at = token_port.create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role,
        now=now,
    )
    refresh_token, refresh_expires_at = issue_refresh_token(
        user_id=user.id,
        refresh_token_port=auth_port,
        token_port=token_port,
        now=now,
    )
    return AuthTokensOutput(
        user=build_auth_user_output(user),
        access_token=access_token,
        refresh_token=refresh_token,
        access_expires_at=access_expires_at,
        refresh_expires_at=refresh_expires_at,
    )


def send_email_quietly(
    email_sender: EmailSenderPort,
    *,
    to: str,
    subject: str,
    body: str,
) -> bool:
    try:
        email_sender.send(to=to, subject=subject, body=body)
    except EmailDeliveryError as exc:
        logger.warning("Email '%s' to %s was not delivered: %s", subject, redact_email(to), exc)
        return False
    return True
