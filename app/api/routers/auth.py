from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, Response

from app.api.deps import (
    get_login_google_use_case,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_refresh_session_use_case,
    get_register_user_use_case,
    get_request_password_reset_use_case,
    get_resend_verification_use_case,
    get_reset_password_use_case,
    get_validate_reset_token_use_case,
    get_verify_email_use_case,
)
from app.api.schemas.auth import (
    AuthTokenResponse,
    AuthUserResponse,
    EmailRequest,
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    ResetTokenStatusResponse,
    VerifyEmailResponse,
)
from app.application.dto.auth import (
    AuthTokensOutput,
    AuthUserOutput,
    LoginGoogleInput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    RegisterUserInput,
    ResetPasswordInput,
)
from app.application.use_cases.login_google import LoginGoogleUseCase
from app.application.use_cases.login_local import LoginLocalUseCase
from app.application.use_cases.logout_session import LogoutSessionUseCase
from app.application.use_cases.refresh_session import RefreshSessionUseCase
from app.application.use_cases.register_user import RegisterUserUseCase
from app.application.use_cases.request_password_reset import RequestPasswordResetUseCase
from app.application.use_cases.resend_verification import ResendVerificationUseCase
from app.application.use_cases.reset_password import ResetPasswordUseCase, ValidateResetTokenUseCase
from app.application.use_cases.verify_email import VerifyEmailUseCase
from app.domain.exceptions import RefreshSessionInvalidError
from app.shared.config import get_settings


router = APIRouter(prefix="/api/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refresh_token"
REFRESH_COOKIE_PATH = "/api/auth"
REGISTERED_MESSAGE = "User registered successfully. Please check your email to verify your account."
EMAIL_VERIFIED_MESSAGE = "Email verified successfully. You can now log in."
LOGGED_OUT_MESSAGE = "Logged out successfully."
RESET_TOKEN_VALID_MESSAGE = "Reset token is valid."


def _set_refresh_cookie(response: Response, refresh_token: str, max_age_seconds: int) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        samesite="lax",
        secure=get_settings().refresh_cookie_secure,
        max_age=max_age_seconds,
        path=REFRESH_COOKIE_PATH,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path=REFRESH_COOKIE_PATH)


def _cookie_max_age_seconds(refresh_expires_at: datetime) -> int:
    now = datetime.now(timezone.utc)
    return max(int((refresh_expires_at - now).total_seconds()), 0)


def user_response(user: AuthUserOutput) -> AuthUserResponse:
    return AuthUserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone_number=user.phone_number,
        role=user.role.value,
        is_verified=user.is_verified,
        profile_picture_url=user.profile_picture_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _session_response(response: Response, output: AuthTokensOutput) -> AuthTokenResponse:
    _set_refresh_cookie(
        response,
        output.refresh_token,
        max_age_seconds=_cookie_max_age_seconds(output.refresh_expires_at),
    )
    return AuthTokenResponse(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        access_expires_at=output.access_expires_at,
        refresh_expires_at=output.refresh_expires_at,
        user=user_response(output.user),
    )


def _presented_refresh_token(cookie_value: str | None, body: RefreshTokenRequest | None) -> str | None:
    if cookie_value:
        return cookie_value
    if body is not None and body.refresh_token:
        return body.refresh_token
    return None


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register_user(
    req: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    output = use_case.execute(
        RegisterUserInput(
            email=req.email,
            password=req.password,
            full_name=req.full_name,
            phone_number=req.phone_number,
        )
    )
    return RegisterResponse(message=REGISTERED_MESSAGE, user=user_response(output.user))


@router.post("/login", response_model=AuthTokenResponse)
def login_local(
    req: LoginRequest,
    response: Response,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    return _session_response(response, output)


@router.post("/google", response_model=AuthTokenResponse)
def login_google(
    req: GoogleLoginRequest,
    response: Response,
    use_case: LoginGoogleUseCase = Depends(get_login_google_use_case),
):
    output = use_case.execute(LoginGoogleInput(id_token=req.id_token))
    return _session_response(response, output)


@router.post("/refresh", response_model=AuthTokenResponse)
def refresh_auth(
    response: Response,
    req: RefreshTokenRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    refresh_token = _presented_refresh_token(refresh_token_cookie, req)
    if not refresh_token:
        raise RefreshSessionInvalidError("Refresh token required.")
    output = use_case.execute(RefreshSessionInput(refresh_token=refresh_token))
    return _session_response(response, output)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    req: RefreshTokenRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    refresh_token = _presented_refresh_token(refresh_token_cookie, req)
    if refresh_token:
        use_case.execute(LogoutInput(refresh_token=refresh_token))
    _clear_refresh_cookie(response)
    return MessageResponse(message=LOGGED_OUT_MESSAGE)


@router.get("/verify-email", response_model=VerifyEmailResponse)
def verify_email(
    token: str = "",
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    user = use_case.execute(token=token)
    return VerifyEmailResponse(message=EMAIL_VERIFIED_MESSAGE, user=user_response(user))


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    req: EmailRequest,
    use_case: ResendVerificationUseCase = Depends(get_resend_verification_use_case),
):
    output = use_case.execute(email=req.email)
    return MessageResponse(message=output.message)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    req: EmailRequest,
    use_case: RequestPasswordResetUseCase = Depends(get_request_password_reset_use_case),
):
    output = use_case.execute(email=req.email)
    return MessageResponse(message=output.message)


@router.get("/reset-password", response_model=ResetTokenStatusResponse)
def validate_reset_token(
    token: str = "",
    use_case: ValidateResetTokenUseCase = Depends(get_validate_reset_token_use_case),
):
    use_case.execute(token=token)
    return ResetTokenStatusResponse(valid=True, message=RESET_TOKEN_VALID_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    req: ResetPasswordRequest,
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
):
    output = use_case.execute(ResetPasswordInput(token=req.token, new_password=req.new_password))
    return MessageResponse(message=output.message)
