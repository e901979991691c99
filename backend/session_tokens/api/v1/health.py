"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from session_tokens.api.deps import json_response, timing
from session_tokens.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database and refresh-token store health.

    Responds ``503`` when either dependency is down, so load balancers stop
    routing sign-ins to an instance that cannot persist sessions.
    """

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    client = get_redis()
    store_backend = "redis" if client is not None else "sql"
    store_status = db_status
    if client is not None:
        try:
            client.ping()
            store_status = "ok"
        except RedisError:
            current_app.logger.exception("healthcheck.redis_error")
            store_status = "fail"

    healthy = db_status == "ok" and store_status == "ok"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "refresh_store": {"backend": store_backend, "status": store_status},
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)
