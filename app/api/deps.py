from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from app.application.dto.auth import AccessTokenClaims
from app.application.ports.auth_port import AuthPort
from app.application.ports.email_sender_port import EmailSenderPort
from app.application.ports.google_oauth_port import GoogleOauthPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.application.use_cases.account_emails import AccountEmailComposer
from app.application.use_cases.auth_gate import AuthGate
from app.application.use_cases.change_password import ChangePasswordUseCase
from app.application.use_cases.login_google import LoginGoogleUseCase
from app.application.use_cases.login_local import LoginLocalUseCase
from app.application.use_cases.logout_session import LogoutSessionUseCase
from app.application.use_cases.manage_profile import GetProfileUseCase, UpdateProfileUseCase
from app.application.use_cases.refresh_session import RefreshSessionUseCase
from app.application.use_cases.register_user import RegisterUserUseCase
from app.application.use_cases.request_password_reset import RequestPasswordResetUseCase
from app.application.use_cases.resend_verification import ResendVerificationUseCase
from app.application.use_cases.reset_password import ResetPasswordUseCase, ValidateResetTokenUseCase
from app.application.use_cases.verify_email import VerifyEmailUseCase
from app.domain.entities.user import Role
from app.infrastructure.db.engine import get_engine
from app.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from app.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def get_auth_port() -> AuthPort:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasherPort:
    from app.infrastructure.security.password_hasher import PasswordHasher

    return PasswordHasher()


@lru_cache(maxsize=1)
def get_token_service() -> TokenPort:
    from app.infrastructure.security.token_service import JwtTokenService

    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="JWT_SECRET is required.")
    return JwtTokenService(
        jwt_secret=settings.jwt_secret,
        access_ttl_minutes=settings.jwt_access_ttl_minutes,
        refresh_ttl_days=settings.jwt_refresh_ttl_days,
    )


@lru_cache(maxsize=1)
def get_google_oauth_client() -> GoogleOauthPort:
    from app.infrastructure.clients.google_oidc_client import GoogleOidcClient

    settings = get_settings()
    if not settings.google_client_ids:
        raise HTTPException(status_code=500, detail="GOOGLE_CLIENT_ID_WEB is required.")
    return GoogleOidcClient(client_ids=settings.google_client_ids)


@lru_cache(maxsize=1)
def get_email_sender() -> EmailSenderPort:
    from app.infrastructure.clients.smtp_email_sender import BackgroundEmailSender, SmtpEmailSender

    settings = get_settings()
    smtp = SmtpEmailSender(
        host=settings.email_host,
        port=settings.email_port,
        use_ssl=settings.email_use_ssl,
        username=settings.email_user,
        password=settings.email_password,
        sender=settings.sender_email,
    )
    executor = ThreadPoolExecutor(max_workers=settings.email_workers, thread_name_prefix="email")
    return BackgroundEmailSender(inner=smtp, executor=executor)


@lru_cache(maxsize=1)
def get_email_composer() -> AccountEmailComposer:
    return AccountEmailComposer(public_base_url=get_settings().backend_public_url)


def get_auth_gate(token_port: TokenPort = Depends(get_token_service)) -> AuthGate:
    return AuthGate(token_port=token_port)


def get_register_user_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    password_hasher: PasswordHasherPort = Depends(get_password_hasher),
    token_port: TokenPort = Depends(get_token_service),
    email_sender: EmailSenderPort = Depends(get_email_sender),
    email_composer: AccountEmailComposer = Depends(get_email_composer),
) -> RegisterUserUseCase:
    return RegisterUserUseCase(
        auth_port=auth_port,
        password_hasher=password_hasher,
        token_port=token_port,
        email_sender=email_sender,
        email_composer=email_composer,
    )


def get_login_local_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    password_hasher: PasswordHasherPort = Depends(get_password_hasher),
    token_port: TokenPort = Depends(get_token_service),
) -> LoginLocalUseCase:
    return LoginLocalUseCase(
        auth_port=auth_port,
        password_hasher=password_hasher,
        token_port=token_port,
    )


def get_login_google_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    google_oauth_port: GoogleOauthPort = Depends(get_google_oauth_client),
    token_port: TokenPort = Depends(get_token_service),
) -> LoginGoogleUseCase:
    return LoginGoogleUseCase(
        auth_port=auth_port,
        google_oauth_port=google_oauth_port,
        token_port=token_port,
    )


def get_refresh_session_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    token_port: TokenPort = Depends(get_token_service),
) -> RefreshSessionUseCase:
    return RefreshSessionUseCase(auth_port=auth_port, token_port=token_port)


def get_logout_session_use_case(auth_port: AuthPort = Depends(get_auth_port)) -> LogoutSessionUseCase:
    return LogoutSessionUseCase(refresh_token_port=auth_port)


def get_verify_email_use_case(auth_port: AuthPort = Depends(get_auth_port)) -> VerifyEmailUseCase:
    return VerifyEmailUseCase(auth_port=auth_port)


def get_resend_verification_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    token_port: TokenPort = Depends(get_token_service),
    email_sender: EmailSenderPort = Depends(get_email_sender),
    email_composer: AccountEmailComposer = Depends(get_email_composer),
) -> ResendVerificationUseCase:
    return ResendVerificationUseCase(
        auth_port=auth_port,
        token_port=token_port,
        email_sender=email_sender,
        email_composer=email_composer,
    )


def get_request_password_reset_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    token_port: TokenPort = Depends(get_token_service),
    email_sender: EmailSenderPort = Depends(get_email_sender),
    email_composer: AccountEmailComposer = Depends(get_email_composer),
) -> RequestPasswordResetUseCase:
    return RequestPasswordResetUseCase(
        auth_port=auth_port,
        token_port=token_port,
        email_sender=email_sender,
        email_composer=email_composer,
    )


def get_validate_reset_token_use_case(auth_port: AuthPort = Depends(get_auth_port)) -> ValidateResetTokenUseCase:
    return ValidateResetTokenUseCase(auth_port=auth_port)


def get_reset_password_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    password_hasher: PasswordHasherPort = Depends(get_password_hasher),
) -> ResetPasswordUseCase:
    return ResetPasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)


def get_change_password_use_case(
    auth_port: AuthPort = Depends(get_auth_port),
    password_hasher: PasswordHasherPort = Depends(get_password_hasher),
) -> ChangePasswordUseCase:
    return ChangePasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)


def get_get_profile_use_case(auth_port: AuthPort = Depends(get_auth_port)) -> GetProfileUseCase:
    return GetProfileUseCase(auth_port=auth_port)


def get_update_profile_use_case(auth_port: AuthPort = Depends(get_auth_port)) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(auth_port=auth_port)


def get_current_claims(
    authorization: str | None = Header(default=None),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> AccessTokenClaims:
    return auth_gate.authenticate_header(authorization)


def require_roles(*roles: Role):
    def _dependency(
        claims: AccessTokenClaims = Depends(get_current_claims),
        auth_gate: AuthGate = Depends(get_auth_gate),
    ) -> AccessTokenClaims:
        return auth_gate.require_role(claims, roles)

    return _dependency
