"""Shared fixtures.

Every test that touches the database builds its own application on a fresh
in-memory SQLite schema; nothing is shared between cases except the RSA key
generated once in :mod:`tests.helpers.keys`.
"""

from __future__ import annotations

import pytest
from faker import Faker

from session_tokens.core.config import TestingConfig
from session_tokens.core.extensions import db as _db
from session_tokens.core.keys import KeyMaterial, load_key_material
from session_tokens.factory import create_app

from tests.factories import bind_session
from tests.helpers.keys import ACCESS_SECRET, PRIVATE_KEY_PEM


class TestConfig(TestingConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ACCESS_TOKEN_SECRET = ACCESS_SECRET
    REFRESH_TOKEN_PRIVATE_KEY = PRIVATE_KEY_PEM
    REFRESH_TOKEN_PRIVATE_KEY_PATH = None
    REFRESH_TOKEN_PUBLIC_KEY = None
    REFRESH_TOKEN_PUBLIC_KEY_PATH = None
    REDIS_URL = None
    MAIN_DOMAIN = None
    LOG_LEVEL = "WARNING"
    CORS_ORIGINS = "*"


@pytest.fixture()
def key_material() -> KeyMaterial:
    return load_key_material(
        {"ACCESS_TOKEN_SECRET": ACCESS_SECRET, "REFRESH_TOKEN_PRIVATE_KEY": PRIVATE_KEY_PEM}
    )


@pytest.fixture()
def app(monkeypatch):
    """Application with :class:`TestConfig` and a created schema.

    The app context stays pushed for the whole test, so the test client and
    the test body share ``db.session``.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    application = create_app(TestConfig, instance_relative_config=False)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def session(app):
    """``db.session``, with the factories bound to it for the test."""
    bind_session(_db.session)
    yield _db.session
    bind_session(None)


@pytest.fixture(scope="session")
def faker() -> Faker:
    Faker.seed(1337)
    return Faker()
