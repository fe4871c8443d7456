from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    body: str


class AccountEmailComposer:
    """Builds the plain-text account emails that carry one-time tokens."""

    def __init__(self, *, public_base_url: str, app_name: str = "Aklny"):
        self._public_base_url = public_base_url.rstrip("/")
        self._app_name = app_name

    def verification_link(self, token: str) -> str:
        return f"{self._public_base_url}/api/auth/verify-email?{urlencode({'token': token})}"

    def reset_link(self, token: str) -> str:
        return f"{self._public_base_url}/api/auth/reset-password?{urlencode({'token': token})}"

    def verification(self, *, name: str, token: str) -> EmailMessage:
        body = (
            f"Hello {name},\n\n"
            f"Thank you for registering with {self._app_name}. "
            "Please verify your email address by opening the link below:\n\n"
            f"{self.verification_link(token)}\n\n"
            "This link expires in 24 hours. If you did not create an account, ignore this email.\n"
        )
        return EmailMessage(subject=f"{self._app_name} - Verify Your Email Address", body=body)

    def password_reset(self, *, name: str, token: str) -> EmailMessage:
        body = (
            f"Hello {name},\n\n"
            f"We received a request to reset the password for your {self._app_name} account. "
            "To choose a new password, open the link below:\n\n"
            f"{self.reset_link(token)}\n\n"
            "This link expires in 1 hour. If you did not request a reset, ignore this email.\n"
        )
        return EmailMessage(subject=f"{self._app_name} - Password Reset Request", body=body)
