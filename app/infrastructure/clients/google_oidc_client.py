from __future__ import annotations

from typing import Sequence

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from app.application.dto.auth import GoogleIdentityInfo
from app.application.ports.google_oauth_port import GoogleOauthPort
from app.domain.exceptions import GoogleTokenValidationError


class GoogleOidcClient(GoogleOauthPort):
    """Verifies Google ID tokens issued to any of the app's clients (web, Android, iOS)."""

    def __init__(self, *, client_ids: Sequence[str]):
        self._client_ids = [client_id for client_id in client_ids if client_id]
        if not self._client_ids:
            raise ValueError("At least one Google client id is required.")

    @property
    def audiences(self) -> list[str]:
        return list(self._client_ids)

    def verify_id_token(self, *, id_token: str) -> GoogleIdentityInfo:
        try:
            payload = id_token_verify(token=id_token, audience=self._client_ids)
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            raise GoogleTokenValidationError(
                "Google authentication failed: Invalid token or network issue."
            ) from exc

        if not payload:
            raise GoogleTokenValidationError("Google authentication failed: Could not get payload from token.")

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise GoogleTokenValidationError("Google authentication failed: Email not provided by Google.")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        return GoogleIdentityInfo(
            subject=str(subject),
            email=str(email),
            email_verified=email_verified,
            name=name,
        )


def id_token_verify(*, token: str, audience: Sequence[str]) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, list(audience))
