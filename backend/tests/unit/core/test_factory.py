"""Tests for the application factory."""

from __future__ import annotations

from session_tokens.core.config import TestingConfig
from session_tokens.core.extensions import KEY_MATERIAL_EXTENSION
from session_tokens.factory import create_app
from tests.helpers.keys import ACCESS_SECRET, PRIVATE_KEY_PEM


class KeyedConfig(TestingConfig):
    ACCESS_TOKEN_SECRET = ACCESS_SECRET
    REFRESH_TOKEN_PRIVATE_KEY = PRIVATE_KEY_PEM


def test_create_app_wires_routes_and_keys():
    app = create_app(KeyedConfig, instance_relative_config=False)

    rules = {rule.rule for rule in app.url_map.iter_rules()}
    assert {
        "/api/v1/health",
        "/api/v1/auth/register",
        "/api/v1/auth/login",
        "/api/v1/auth/self",
        "/api/v1/auth/refresh",
        "/api/v1/auth/logout",
    } <= rules
    assert app.extensions[KEY_MATERIAL_EXTENSION].access_secret == ACCESS_SECRET
    assert app.config["JWT_SECRET_KEY"] == ACCESS_SECRET
    assert "tokens" in app.cli.commands
