from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.dto.auth import ChangePasswordInput, ResetPasswordInput
from app.application.use_cases.change_password import ChangePasswordUseCase
from app.application.use_cases.request_password_reset import (
    PASSWORD_RESET_REQUESTED_MESSAGE,
    RequestPasswordResetUseCase,
)
from app.application.use_cases.resend_verification import (
    RESEND_VERIFICATION_MESSAGE,
    ResendVerificationUseCase,
)
from app.application.use_cases.reset_password import ResetPasswordUseCase, ValidateResetTokenUseCase
from app.application.use_cases.verify_email import VerifyEmailUseCase
from app.domain.exceptions import (
    AlreadyVerifiedError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidOrExpiredTokenError,
    SocialOnlyAccountError,
)

from conftest import RecordingEmailSender, make_user


def _in(hours: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=hours)


def test_verify_email_marks_user_verified_and_is_single_use(auth_port):
    auth_port.add_user(
        make_user(is_verified=False, email_verification_token="tok-1", email_verification_token_expires_at=_in(24))
    )
    use_case = VerifyEmailUseCase(auth_port=auth_port)

    user = use_case.execute(token="tok-1")

    assert user.is_verified is True
    stored = auth_port.get_user_by_id(user_id="user-1")
    assert stored.email_verification_token is None
    assert stored.email_verification_token_expires_at is None
    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(token="tok-1")


def test_verify_email_rejects_expired_token(auth_port):
    auth_port.add_user(
        make_user(is_verified=False, email_verification_token="tok-1", email_verification_token_expires_at=_in(-1))
    )
    use_case = VerifyEmailUseCase(auth_port=auth_port)

    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(token="tok-1")

    assert auth_port.get_user_by_id(user_id="user-1").is_verified is False


@pytest.mark.parametrize("token", ["", "   ", "unknown"])
def test_verify_email_rejects_missing_or_unknown_token(auth_port, token):
    use_case = VerifyEmailUseCase(auth_port=auth_port)

    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(token=token)


def _resend_use_case(auth_port, token_port, email_sender, email_composer):
    return ResendVerificationUseCase(
        auth_port=auth_port,
        token_port=token_port,
        email_sender=email_sender,
        email_composer=email_composer,
    )


def test_resend_verification_replaces_token_and_sends_email(auth_port, token_port, email_sender, email_composer):
    auth_port.add_user(
        make_user(is_verified=False, email_verification_token="old", email_verification_token_expires_at=_in(1))
    )
    use_case = _resend_use_case(auth_port, token_port, email_sender, email_composer)

    output = use_case.execute(email="USER@example.com")

    assert output.message == RESEND_VERIFICATION_MESSAGE
    stored = auth_port.get_user_by_id(user_id="user-1")
    assert stored.email_verification_token not in (None, "old")
    assert stored.email_verification_token_expires_at > _in(23)
    assert email_sender.last_token() == stored.email_verification_token


def test_resend_verification_unknown_email_returns_generic_message(
    auth_port, token_port, email_sender, email_composer
):
    use_case = _resend_use_case(auth_port, token_port, email_sender, email_composer)

    output = use_case.execute(email="nobody@example.com")

    assert output.message == RESEND_VERIFICATION_MESSAGE
    assert email_sender.sent == []


def test_resend_verification_already_verified_is_distinct(auth_port, token_port, email_sender, email_composer):
    auth_port.add_user(make_user(is_verified=True))
    use_case = _resend_use_case(auth_port, token_port, email_sender, email_composer)

    with pytest.raises(AlreadyVerifiedError):
        use_case.execute(email="user@example.com")

    assert email_sender.sent == []


def _request_reset_use_case(auth_port, token_port, email_sender, email_composer):
    return RequestPasswordResetUseCase(
        auth_port=auth_port,
        token_port=token_port,
        email_sender=email_sender,
        email_composer=email_composer,
    )


def test_request_password_reset_same_message_for_known_and_unknown_email(
    auth_port, token_port, email_sender, email_composer
):
    auth_port.add_user(make_user())
    use_case = _request_reset_use_case(auth_port, token_port, email_sender, email_composer)

    known = use_case.execute(email="user@example.com")
    unknown = use_case.execute(email="nobody@example.com")

    assert known.message == unknown.message == PASSWORD_RESET_REQUESTED_MESSAGE
    assert len(email_sender.sent) == 1
    stored = auth_port.get_user_by_id(user_id="user-1")
    assert stored.password_reset_token == email_sender.last_token()
    assert stored.password_reset_token_expires_at < _in(1.01)
    assert "/api/auth/reset-password?token=" in email_sender.sent[0].body


def test_request_password_reset_email_failure_keeps_generic_answer(auth_port, token_port, email_composer):
    auth_port.add_user(make_user())
    use_case = _request_reset_use_case(auth_port, token_port, RecordingEmailSender(fail=True), email_composer)

    output = use_case.execute(email="user@example.com")

    assert output.message == PASSWORD_RESET_REQUESTED_MESSAGE
    assert auth_port.get_user_by_id(user_id="user-1").password_reset_token is not None


def test_reset_password_changes_hash_and_revokes_every_session(auth_port, password_hasher):
    auth_port.add_user(make_user(password_reset_token="reset-1", password_reset_token_expires_at=_in(1)))
    now = datetime.now(timezone.utc)
    for token_id in ("r-1", "r-2"):
        auth_port.create_refresh_token(token_id=token_id, user_id="user-1", expires_at=_in(48), created_at=now)
    auth_port.create_refresh_token(token_id="other", user_id="user-2", expires_at=_in(48), created_at=now)
    use_case = ResetPasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    use_case.execute(ResetPasswordInput(token="reset-1", new_password="brand-new-password"))

    stored = auth_port.get_user_by_id(user_id="user-1")
    assert stored.password_hash == "hashed::brand-new-password"
    assert stored.password_reset_token is None
    assert auth_port.active_refresh_tokens("user-1") == []
    assert len(auth_port.active_refresh_tokens("user-2")) == 1
    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(ResetPasswordInput(token="reset-1", new_password="another-password"))


def test_reset_password_rejects_expired_token(auth_port, password_hasher):
    auth_port.add_user(make_user(password_reset_token="reset-1", password_reset_token_expires_at=_in(-0.5)))
    use_case = ResetPasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(ResetPasswordInput(token="reset-1", new_password="brand-new-password"))

    assert auth_port.get_user_by_id(user_id="user-1").password_hash == "hashed::correct-password"


def test_reset_password_validates_new_password_before_consuming_token(auth_port, password_hasher):
    auth_port.add_user(make_user(password_reset_token="reset-1", password_reset_token_expires_at=_in(1)))
    use_case = ResetPasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    with pytest.raises(InvalidInputError):
        use_case.execute(ResetPasswordInput(token="reset-1", new_password="short"))

    assert auth_port.get_user_by_id(user_id="user-1").password_reset_token == "reset-1"


def test_reset_password_reports_unknown_token_before_password_policy(auth_port, password_hasher):
    auth_port.add_user(make_user(password_reset_token="reset-1", password_reset_token_expires_at=_in(-0.5)))
    use_case = ResetPasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(ResetPasswordInput(token="nope", new_password="x"))
    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(ResetPasswordInput(token="reset-1", new_password="x"))


def test_validate_reset_token(auth_port):
    auth_port.add_user(make_user(password_reset_token="reset-1", password_reset_token_expires_at=_in(1)))
    use_case = ValidateResetTokenUseCase(auth_port=auth_port)

    use_case.execute(token="reset-1")
    with pytest.raises(InvalidOrExpiredTokenError):
        use_case.execute(token="nope")


def test_change_password_requires_current_password(auth_port, password_hasher):
    auth_port.add_user(make_user())
    use_case = ChangePasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    with pytest.raises(InvalidCredentialsError):
        use_case.execute(
            ChangePasswordInput(user_id="user-1", current_password="wrong", new_password="brand-new-password")
        )


def test_change_password_updates_hash_and_revokes_sessions(auth_port, password_hasher):
    auth_port.add_user(make_user())
    auth_port.create_refresh_token(
        token_id="r-1", user_id="user-1", expires_at=_in(48), created_at=datetime.now(timezone.utc)
    )
    use_case = ChangePasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    output = use_case.execute(
        ChangePasswordInput(
            user_id="user-1",
            current_password="correct-password",
            new_password="brand-new-password",
        )
    )

    assert output.message == "Password updated successfully."
    assert auth_port.get_user_by_id(user_id="user-1").password_hash == "hashed::brand-new-password"
    assert auth_port.active_refresh_tokens("user-1") == []


def test_change_password_rejects_social_only_account(auth_port, password_hasher):
    auth_port.add_user(make_user(password_hash=None, google_id="google-sub-1"))
    use_case = ChangePasswordUseCase(auth_port=auth_port, password_hasher=password_hasher)

    with pytest.raises(SocialOnlyAccountError):
        use_case.execute(
            ChangePasswordInput(user_id="user-1", current_password="x", new_password="brand-new-password")
        )
