from __future__ import annotations

import logging
from typing import Iterable

from app.application.dto.auth import AccessTokenClaims
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import Role
from app.domain.exceptions import (
    AuthenticationRequiredError,
    ExpiredTokenError,
    ForbiddenError,
    InvalidTokenError,
)
from app.domain.services.roles import has_role


logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class AuthGate:
    """Validates access tokens for HTTP requests and socket handshakes.

    Rejections raise AuthenticationRequiredError, InvalidTokenError or
    ExpiredTokenError; the cause is logged here so callers can answer with a
    uniform message.
    """

    def __init__(self, *, token_port: TokenPort):
        self._token_port = token_port

    def authenticate(self, token: str | None) -> AccessTokenClaims:
        if not token:
            logger.info("Access rejected: missing token.")
            raise AuthenticationRequiredError("Authentication token required.")
        try:
            return self._token_port.decode_access_token(token=token)
        except ExpiredTokenError:
            logger.info("Access rejected: expired token.")
            raise
        except InvalidTokenError:
            logger.info("Access rejected: invalid token.")
            raise

    def authenticate_header(self, authorization: str | None) -> AccessTokenClaims:
        return self.authenticate(extract_bearer_token(authorization))

    @staticmethod
    def has_role(claims: AccessTokenClaims, allowed_roles: Iterable[Role | str]) -> bool:
        return has_role(claims.role, allowed_roles)

    def require_role(self, claims: AccessTokenClaims, allowed_roles: Iterable[Role | str]) -> AccessTokenClaims:
        if not self.has_role(claims, allowed_roles):
            raise ForbiddenError("Access denied: Insufficient permissions.")
        return claims
