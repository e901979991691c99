"""Token delivery over HTTP-only cookies."""

from __future__ import annotations

from flask import Response, current_app

from session_tokens.core.constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from session_tokens.services.session.dto import TokenPairOut


def _cookie_options() -> dict[str, object]:
    # scoped to the issuing domain, strict same-site, hidden from scripts
    return {
        "domain": current_app.config.get("MAIN_DOMAIN"),
        "samesite": "Strict",
        "httponly": True,
        "secure": bool(current_app.config.get("COOKIE_SECURE", False)),
    }


def deliver_tokens(response: Response, tokens: TokenPairOut) -> Response:
    """Set both token cookies, each living as long as its token."""
    options = _cookie_options()
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=current_app.config["ACCESS_TOKEN_EXPIRES"],
        **options,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=current_app.config["REFRESH_TOKEN_EXPIRES"],
        **options,
    )
    return response


def clear_tokens(response: Response) -> Response:
    """Instruct the client to drop both token cookies."""
    options = _cookie_options()
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)
    return response
