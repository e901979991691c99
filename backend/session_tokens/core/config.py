"""Environment-driven configuration classes, selected by ``APP_ENV``."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

from session_tokens.core.constants import (
    ACCESS_TOKEN_COOKIE,
    ACCESS_TOKEN_LIFETIME,
    DEFAULT_ISSUER,
    REFRESH_TOKEN_LIFETIME,
)

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

# no-op when there is no .env file
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag.

    Parameters
    ----------
    name: str
        Environment variable name.
    default: bool, optional
        Returned when the variable is unset.

    Returns
    -------
    bool
        ``True`` for ``1``/``true``/``yes``/``y``/``on`` (any case).
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_seconds(name: str, default: timedelta) -> timedelta:
    """Read a lifetime given in whole seconds.

    Parameters
    ----------
    name: str
        Environment variable name.
    default: datetime.timedelta
        Returned when the variable is unset or blank.

    Returns
    -------
    datetime.timedelta
        Parsed lifetime.

    Raises
    ------
    ValueError
        If the value is not a positive integer.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    seconds = int(raw)
    if seconds <= 0:
        raise ValueError(f"{name} must be a positive number of seconds.")
    return timedelta(seconds=seconds)


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    ACCESS_TOKEN_SECRET: str | None
        Shared secret signing and verifying access tokens (HS256). The app
        refuses to start without it.
    REFRESH_TOKEN_PRIVATE_KEY, REFRESH_TOKEN_PRIVATE_KEY_PATH: str | None
        RSA private key signing refresh tokens (RS256), inline PEM or a path.
    REFRESH_TOKEN_PUBLIC_KEY, REFRESH_TOKEN_PUBLIC_KEY_PATH: str | None
        Optional matching public key; derived from the private key if unset.
    JWT_ISSUER: str
        ``iss`` written to and required on every token.
    ACCESS_TOKEN_EXPIRES, REFRESH_TOKEN_EXPIRES: datetime.timedelta
        Token lifetimes (1 day and 365 days). Cookies live as long.
    MAIN_DOMAIN: str | None
        ``Domain`` attribute of the token cookies.
    COOKIE_SECURE: bool
        Adds ``Secure`` to the token cookies.
    REDIS_URL: str | None
        Keeps refresh-token records in Redis instead of the database.

    Notes
    -----
    The ``JWT_*`` keys configure flask-jwt-extended, which checks access
    tokens on protected routes with the same secret and issuer.
    """

    API_BASE_PREFIX = "/api"
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Signing keys
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    REFRESH_TOKEN_PRIVATE_KEY = os.getenv("REFRESH_TOKEN_PRIVATE_KEY")
    REFRESH_TOKEN_PRIVATE_KEY_PATH = os.getenv("REFRESH_TOKEN_PRIVATE_KEY_PATH")
    REFRESH_TOKEN_PUBLIC_KEY = os.getenv("REFRESH_TOKEN_PUBLIC_KEY")
    REFRESH_TOKEN_PUBLIC_KEY_PATH = os.getenv("REFRESH_TOKEN_PUBLIC_KEY_PATH")

    # Token lifecycle
    JWT_ISSUER = os.getenv("JWT_ISSUER", DEFAULT_ISSUER)
    ACCESS_TOKEN_EXPIRES = env_seconds("ACCESS_TOKEN_EXPIRES", ACCESS_TOKEN_LIFETIME)
    REFRESH_TOKEN_EXPIRES = env_seconds("REFRESH_TOKEN_EXPIRES", REFRESH_TOKEN_LIFETIME)

    # Cookie delivery
    MAIN_DOMAIN = os.getenv("MAIN_DOMAIN") or None
    COOKIE_SECURE = env_bool("COOKIE_SECURE", False)

    # flask-jwt-extended
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_ACCESS_COOKIE_NAME = ACCESS_TOKEN_COOKIE
    JWT_COOKIE_CSRF_PROTECT = False  # SameSite=Strict cookies
    JWT_DECODE_ISSUER = JWT_ISSUER

    # Storage
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = 600

    DEBUG = False
    TESTING = False
    PROPAGATE_EXCEPTIONS = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Test runs.

    Notes
    -----
    - In-memory SQLite unless ``TEST_DATABASE_URL`` is set.
    - Never talks to Redis; refresh-token records live in SQL.
    - Token cookies carry no ``Domain`` so the test client sends them back.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    MAIN_DOMAIN = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Production: no SQL echo, token cookies always ``Secure``."""

    SQLALCHEMY_ECHO = False
    COOKIE_SECURE = True


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class named by ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        :class:`DevelopmentConfig` when ``APP_ENV`` is unset or unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
