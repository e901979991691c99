"""Session endpoints: register, login, self, refresh and logout."""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity

from session_tokens.api.cookies import clear_tokens, deliver_tokens
from session_tokens.api.deps import (
    current_refresh_claims,
    get_session_service,
    json_response,
    require_auth,
    require_refresh_token,
    timing,
)
from session_tokens.schemas import (
    IdentitySchema,
    LoginSchema,
    RegisterSchema,
    SessionResponseSchema,
)
from session_tokens.services.session.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
session_schema = SessionResponseSchema()
identity_schema = IdentitySchema()


@bp.post("/register")
@timing
def register():
    """Create a customer account and start its first session."""

    data = register_schema.load(request.get_json(silent=True) or {})
    session = get_session_service().register(RegisterIn(**data))
    response = json_response(session_schema.dump({"id": session.identity_id}), status=201)
    return deliver_tokens(response, session.tokens)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and start a session."""

    data = login_schema.load(request.get_json(silent=True) or {})
    session = get_session_service().login(LoginIn(**data))
    response = json_response(session_schema.dump({"id": session.identity_id}))
    return deliver_tokens(response, session.tokens)


@bp.get("/self")
@require_auth
@timing
def whoami():
    """Return the authenticated identity, never its credential."""

    identity = get_session_service().whoami(get_jwt_identity())
    return json_response(identity_schema.dump(identity))


@bp.post("/refresh")
@require_refresh_token(check_revoked=True)
@timing
def refresh():
    """Rotate the refresh token and deliver a new token pair."""

    presented = current_refresh_claims()
    session = get_session_service().refresh(
        RefreshIn(identity_id=presented.claims.sub, record_id=presented.record_id)
    )
    response = json_response(session_schema.dump({"id": session.identity_id}))
    return deliver_tokens(response, session.tokens)


@bp.post("/logout")
@require_auth
@require_refresh_token(check_revoked=False)
@timing
def logout():
    """Revoke the session's refresh token and clear both cookies."""

    presented = current_refresh_claims()
    get_session_service().logout(LogoutIn(record_id=presented.record_id))
    return clear_tokens(json_response({}))
