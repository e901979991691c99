"""Unit tests for environment-driven configuration helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from session_tokens.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_seconds,
    get_config,
)


def test_env_seconds_defaults_when_unset(monkeypatch):
    monkeypatch.delenv("SOME_LIFETIME", raising=False)

    assert env_seconds("SOME_LIFETIME", timedelta(days=1)) == timedelta(days=1)


def test_env_seconds_parses_positive_integers(monkeypatch):
    monkeypatch.setenv("SOME_LIFETIME", "900")

    assert env_seconds("SOME_LIFETIME", timedelta(days=1)) == timedelta(minutes=15)


@pytest.mark.parametrize("raw", ["0", "-5"])
def test_env_seconds_rejects_non_positive(monkeypatch, raw):
    monkeypatch.setenv("SOME_LIFETIME", raw)

    with pytest.raises(ValueError):
        env_seconds("SOME_LIFETIME", timedelta(days=1))


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("yes", True), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)

    assert env_bool("SOME_FLAG") is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("testing", TestingConfig),
        ("production", ProductionConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, name, expected):
    monkeypatch.setenv("APP_ENV", name)

    assert get_config() is expected


def test_token_lifetimes_default_to_one_day_and_one_year():
    assert TestingConfig.ACCESS_TOKEN_EXPIRES == timedelta(days=1)
    assert TestingConfig.REFRESH_TOKEN_EXPIRES == timedelta(days=365)
    assert ProductionConfig.COOKIE_SECURE is True
