"""Cross-origin access to the API for browser front-ends."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from session_tokens.core.logger import REQUEST_ID_HEADER


def _origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def init_app(app: Flask) -> None:
    """Allow the origins listed in ``CORS_ORIGINS`` to call ``/api/*``.

    Token cookies only travel on credentialed requests, and browsers refuse
    credentials with a wildcard origin: an explicit list enables credentials,
    a blank or ``*`` value allows any origin without them.
    """
    origins = _origins(app.config.get("CORS_ORIGINS", ""))
    any_origin = not origins or origins == ["*"]
    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if any_origin else origins}},
        supports_credentials=not any_origin,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
