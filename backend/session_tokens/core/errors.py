"""Problem Details (RFC 7807) responses for every error the API can raise.

Service errors are mapped to stable ``code`` values through
:data:`_SERVICE_ERRORS`; authentication failures detected by
flask-jwt-extended go through the same renderer so clients see one error
shape for everything.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from session_tokens.core.extensions import jwt
from session_tokens.core.logger import ensure_request_id
from session_tokens.services._shared.errors import (
    DuplicateEmailError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    InvalidTokenError,
    RefreshTokenReusedError,
    ServiceError,
    StoreUnavailableError,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Most specific first: RefreshTokenReusedError is an InvalidTokenError
_SERVICE_ERRORS: tuple[tuple[type[ServiceError], int, str], ...] = (
    (DuplicateEmailError, HTTPStatus.BAD_REQUEST, "duplicate_email"),
    (InvalidCredentialsError, HTTPStatus.BAD_REQUEST, "invalid_credentials"),
    (IdentityNotFoundError, HTTPStatus.BAD_REQUEST, "identity_not_found"),
    (RefreshTokenReusedError, HTTPStatus.UNAUTHORIZED, "refresh_token_reused"),
    (InvalidTokenError, HTTPStatus.UNAUTHORIZED, "invalid_token"),
    (StoreUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE, "store_unavailable"),
)

_HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    500: "internal_server_error",
    503: "service_unavailable",
}


def _problem(
    status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build the Problem Details body, tagged with the current request id."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """
    Render a Problem Details response.

    :param status: HTTP status code.
    :param code: Stable machine-readable code.
    :param message: Client-safe description.
    :param details: Optional structured, client-safe details.
    :returns: ``(response, status)`` pair suitable for a Flask view.
    """
    response = jsonify(_problem(status, code, message, details))
    response.mimetype = PROBLEM_MIMETYPE
    return response, int(status)


def _respond(
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    *,
    exc_info: bool = False,
) -> tuple[Response, int]:
    # 5xx are errors with traceback, 4xx are client mistakes
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "Request failed: code=%s status=%s detail=%s",
        code,
        status,
        message,
        exc_info=exc_info,
    )
    return problem_response(status=status, code=code, message=message, details=details)


class APIError(Exception):
    """
    Error raised by views and guards that maps directly to a response.

    :param message: Client-safe description.
    :param status_code: HTTP status, ``400`` by default.
    :param code: Stable machine-readable code.
    :param details: Optional structured details.
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


class Unauthorized(APIError):
    """Missing or unusable credentials."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a service-level error to an API error.

    :param exc: Error raised by a service or adapter.
    :returns: API error carrying the HTTP status and stable code.
    """
    for error_type, status, code in _SERVICE_ERRORS:
        if isinstance(exc, error_type):
            return APIError(str(exc), status_code=status, code=code)
    return APIError(str(exc) or "Bad request")


def _register_jwt_loaders() -> None:
    """Route flask-jwt-extended authentication failures through :func:`_respond`.

    A token of the wrong type (e.g. a refresh token sent as access token)
    fails decoding and lands in the ``invalid_token_loader``.
    """

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _respond(HTTPStatus.UNAUTHORIZED, "unauthorized", reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _respond(HTTPStatus.UNAUTHORIZED, "invalid_token", reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _respond(HTTPStatus.UNAUTHORIZED, "token_expired", "Token has expired.")


def init_app(app: Flask) -> None:
    """Register the Problem Details handlers on ``app``."""

    _register_jwt_loaders()

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return _respond(err.status_code, err.code, err.message, err.details or None)

    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        return _api_error(translate_service_error(err))

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return _respond(
            HTTPStatus.BAD_REQUEST,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(status, code, message)

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        return _respond(HTTPStatus.CONFLICT, "conflict", "Resource conflict", exc_info=True)

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        return _respond(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        # internals never reach the client
        return _respond(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
            exc_info=True,
        )
