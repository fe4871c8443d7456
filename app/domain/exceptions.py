from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class EmailAlreadyExistsError(DomainError):
    """An account with this email already exists."""


class InvalidCredentialsError(DomainError):
    """Email not found or password mismatch."""


class EmailNotVerifiedError(DomainError):
    """Account exists but its email was never verified."""


class SocialOnlyAccountError(DomainError):
    """Account has no password; it signs in through an external provider."""


class AccountConflictError(DomainError):
    """External identity cannot be linked to the account sharing its email."""


class InvalidOrExpiredTokenError(DomainError):
    """Verification or reset token is unknown, consumed or expired."""


class AlreadyVerifiedError(DomainError):
    """Email is already verified."""


class GoogleTokenValidationError(DomainError):
    """External provider token failed validation."""


class AuthenticationRequiredError(DomainError):
    """No access token was presented."""


class InvalidTokenError(DomainError):
    """Access token is malformed or has a bad signature."""


class ExpiredTokenError(DomainError):
    """Access token signature is valid but it has expired."""


class ForbiddenError(DomainError):
    """Authenticated identity lacks the required role."""


class RefreshSessionInvalidError(DomainError):
    """Refresh token is unknown, revoked or expired."""


class DuplicateRefreshTokenIdError(DomainError):
    """Generated refresh token id collided with an existing one."""


class EmailDeliveryError(DomainError):
    """Email could not be delivered."""


class UserNotFoundError(DomainError):
    """User does not exist."""


class InvalidInputError(DomainError):
    """Request data fails a business validation rule."""
