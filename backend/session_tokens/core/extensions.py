"""Extension singletons and the per-app resources built at startup.

``init_app`` loads the signing keys first: a missing or malformed key raises
:class:`~session_tokens.core.keys.SigningKeyUnavailableError` before any
other extension is bound, so a misconfigured process never serves requests.
"""

from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from session_tokens.core.keys import KeyMaterial, TokenClass, load_key_material

log = logging.getLogger(__name__)

# Constraint names are referenced by migrations and by ``violates()``
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()

KEY_MATERIAL_EXTENSION = "key_material"
REDIS_EXTENSION = "redis_client"


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Cannot reach Redis at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """Load key material, then bind SQLAlchemy, Alembic, JWT and Redis to ``app``.

    Parameters
    ----------
    app: flask.Flask
        Application being built by the factory.
    """
    keys = load_key_material(app.config)
    app.extensions[KEY_MATERIAL_EXTENSION] = keys

    # flask-jwt-extended checks access tokens with the same secret and issuer
    app.config["JWT_SECRET_KEY"] = keys.access_secret
    app.config["JWT_ALGORITHM"] = KeyMaterial.algorithm(TokenClass.ACCESS)
    app.config["JWT_DECODE_ISSUER"] = app.config.get("JWT_ISSUER")

    db.init_app(app)
    from session_tokens import models  # noqa: F401  (register tables for Alembic)

    migrate.init_app(app, db)
    jwt.init_app(app)

    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        app.extensions[REDIS_EXTENSION] = _connect_redis(redis_url)
        log.info("Refresh-token records are kept in Redis")
    else:
        app.extensions.pop(REDIS_EXTENSION, None)


def get_key_material() -> KeyMaterial:
    """Return the key material loaded for the current application."""
    keys = current_app.extensions.get(KEY_MATERIAL_EXTENSION)
    if keys is None:
        raise RuntimeError("Key material is not loaded. Call init_app() first.")
    return keys


def get_redis() -> redis.Redis | None:
    """Return the Redis client of the current application, if Redis is configured."""
    return current_app.extensions.get(REDIS_EXTENSION)
