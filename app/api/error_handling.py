from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.domain.exceptions import (
    AccountConflictError,
    AlreadyVerifiedError,
    AuthenticationRequiredError,
    DomainError,
    EmailAlreadyExistsError,
    EmailNotVerifiedError,
    ExpiredTokenError,
    ForbiddenError,
    GoogleTokenValidationError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    RefreshSessionInvalidError,
    SocialOnlyAccountError,
    UserNotFoundError,
)


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."

DOMAIN_ERROR_STATUS: dict[type[DomainError], int] = {
    EmailAlreadyExistsError: 409,
    InvalidCredentialsError: 401,
    EmailNotVerifiedError: 403,
    SocialOnlyAccountError: 400,
    AccountConflictError: 409,
    InvalidOrExpiredTokenError: 400,
    AlreadyVerifiedError: 409,
    GoogleTokenValidationError: 401,
    AuthenticationRequiredError: 401,
    InvalidTokenError: 403,
    ExpiredTokenError: 401,
    ForbiddenError: 403,
    RefreshSessionInvalidError: 401,
    UserNotFoundError: 404,
    InvalidInputError: 400,
}


def status_for_domain_error(exc: DomainError) -> int | None:
    for error_type in type(exc).__mro__:
        status_code = DOMAIN_ERROR_STATUS.get(error_type)
        if status_code is not None:
            return status_code
    return None


def _message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value.")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain failures to `{"message": ...}` bodies.

    Unmapped domain errors and unexpected exceptions are logged with their
    traceback and answered with a generic 500.
    """

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        status_code = status_for_domain_error(exc)
        if status_code is None:
            logger.exception("Unhandled domain error on %s %s", request.method, request.url.path, exc_info=exc)
            return _message_response(500, INTERNAL_ERROR_MESSAGE)
        logger.info(
            "%s on %s %s -> %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            status_code,
        )
        return _message_response(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _message_response(400, _validation_message(exc))

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return _message_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _message_response(500, INTERNAL_ERROR_MESSAGE)
