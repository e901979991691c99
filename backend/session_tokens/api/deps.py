"""Request-scoped helpers for the v1 handlers.

- building the session service from the resources loaded at startup,
- guards that verify access and refresh tokens,
- small response utilities.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from session_tokens.core.constants import REFRESH_TOKEN_COOKIE
from session_tokens.core.errors import Unauthorized
from session_tokens.core.extensions import get_key_material, get_redis
from session_tokens.infra.jwt import JWTTokenProvider
from session_tokens.infra.redis import RedisRefreshTokenStore
from session_tokens.infra.sqlalchemy import SQLAlchemyRefreshTokenStore
from session_tokens.services._shared.ports import RefreshTokenStore
from session_tokens.services.identity.service import SQLAlchemyIdentityProvider
from session_tokens.services.session.service import SessionService
from session_tokens.services.tokens.dto import AuthTokenConfig, RefreshClaims
from session_tokens.services.tokens.service import TokenService

F = TypeVar("F", bound=Callable[..., Any])


def json_response(payload: Any, *, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Log how long the wrapped handler took, at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            current_app.logger.debug(
                "handler finished",
                extra={
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    return wrapper  # type: ignore[return-value]


def get_refresh_store() -> RefreshTokenStore:
    """Return the Redis store when Redis is configured, otherwise the SQL one."""

    ttl = current_app.config["REFRESH_TOKEN_EXPIRES"]
    client = get_redis()
    if client is not None:
        return RedisRefreshTokenStore(r=client, ttl=ttl)
    return SQLAlchemyRefreshTokenStore(ttl=ttl)


def get_token_service() -> TokenService:
    """Build the token issuer from the key material loaded at startup."""

    provider = JWTTokenProvider(
        keys=get_key_material(),
        issuer=current_app.config["JWT_ISSUER"],
    )
    return TokenService(
        token_provider=provider,
        refresh_store=get_refresh_store(),
        token_cfg=AuthTokenConfig(
            access_expires=current_app.config["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=current_app.config["REFRESH_TOKEN_EXPIRES"],
        ),
    )


def get_session_service() -> SessionService:
    return SessionService(identities=SQLAlchemyIdentityProvider(), tokens=get_token_service())


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token (cookie or Bearer)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_refresh_token(*, check_revoked: bool = True) -> Callable[[F], F]:
    """
    Ensure the request carries a valid refresh token cookie.

    :param check_revoked: Also reject tokens whose record was deleted.
        Logout skips this so that logging out twice is not an error.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            token = request.cookies.get(REFRESH_TOKEN_COOKIE)
            if not token:
                raise Unauthorized(f"Missing cookie \"{REFRESH_TOKEN_COOKIE}\"")
            g.refresh_claims = get_token_service().verify_refresh_token(
                token, check_revoked=check_revoked
            )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def current_refresh_claims() -> RefreshClaims:
    """Return the refresh claims verified by :func:`require_refresh_token`."""

    claims = getattr(g, "refresh_claims", None)
    if claims is None:
        raise RuntimeError("No verified refresh token on this request.")
    return cast(RefreshClaims, claims)
