"""Unit tests for the PyJWT token provider."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from session_tokens.core.keys import KeyMaterial, TokenClass, load_key_material
from session_tokens.infra.jwt import JWTTokenProvider
from session_tokens.services._shared.errors import InvalidTokenError
from tests.helpers.keys import PRIVATE_KEY_PEM

CLAIMS = {
    "sub": "1",
    "role": "customer",
    "tenant": "",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
}

# --------------------------------------------------------------------------- #
# Fixtures
# --------------------------------------------------------------------------- #


@pytest.fixture()
def provider(key_material: KeyMaterial) -> JWTTokenProvider:
    return JWTTokenProvider(keys=key_material, issuer="session-tokens-test")


# --------------------------------------------------------------------------- #
# Tests
# --------------------------------------------------------------------------- #


def test_access_token_round_trip(provider):
    token = provider.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))

    payload = provider.decode(token, token_class=TokenClass.ACCESS)

    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    assert payload["type"] == "access"
    assert payload["iss"] == "session-tokens-test"
    assert payload["exp"] - payload["iat"] == 300
    assert {k: payload[k] for k in CLAIMS} == CLAIMS


def test_refresh_token_carries_record_id_as_jti(provider):
    token = provider.create_refresh_token(
        claims={**CLAIMS, "id": "17"}, expires_delta=timedelta(days=1), jti="17"
    )

    payload = provider.decode(token, token_class=TokenClass.REFRESH)

    assert jwt.get_unverified_header(token)["alg"] == "RS256"
    assert payload["jti"] == "17"
    assert payload["id"] == "17"


def test_access_tokens_get_unique_ids(provider):
    first = provider.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))
    second = provider.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))

    first_jti = provider.decode(first, token_class=TokenClass.ACCESS)["jti"]
    second_jti = provider.decode(second, token_class=TokenClass.ACCESS)["jti"]

    assert first_jti != second_jti


def test_token_classes_are_not_interchangeable(provider):
    access = provider.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))
    refresh = provider.create_refresh_token(
        claims=CLAIMS, expires_delta=timedelta(days=1), jti="1"
    )

    with pytest.raises(InvalidTokenError):
        provider.decode(access, token_class=TokenClass.REFRESH)
    with pytest.raises(InvalidTokenError):
        provider.decode(refresh, token_class=TokenClass.ACCESS)


def test_type_claim_is_checked(provider, key_material):
    # Signed with the right key and algorithm but labelled as the other class
    forged = jwt.encode(
        {
            **CLAIMS,
            "iss": "session-tokens-test",
            "iat": datetime.now(UTC),
            "exp": datetime.now(UTC) + timedelta(minutes=5),
            "type": "access",
            "jti": "1",
        },
        key_material.refresh_private_key,
        algorithm="RS256",
    )

    with pytest.raises(InvalidTokenError, match="Wrong token type"):
        provider.decode(forged, token_class=TokenClass.REFRESH)


def test_foreign_key_is_rejected(provider):
    other = JWTTokenProvider(
        keys=load_key_material(
            {
                "ACCESS_TOKEN_SECRET": "another-secret-" + "y" * 40,
                "REFRESH_TOKEN_PRIVATE_KEY": PRIVATE_KEY_PEM,
            }
        ),
        issuer="session-tokens-test",
    )
    token = other.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))

    with pytest.raises(InvalidTokenError, match="Invalid token"):
        provider.decode(token, token_class=TokenClass.ACCESS)


def test_issuer_is_checked(provider, key_material):
    other = JWTTokenProvider(keys=key_material, issuer="someone-else")
    token = other.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))

    with pytest.raises(InvalidTokenError):
        provider.decode(token, token_class=TokenClass.ACCESS)


def test_missing_required_claim_is_rejected(provider, key_material):
    token = jwt.encode(
        {
            **CLAIMS,
            "iss": "session-tokens-test",
            "iat": datetime.now(UTC),
            "exp": datetime.now(UTC) + timedelta(minutes=5),
            "type": "access",
        },
        key_material.access_secret,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        provider.decode(token, token_class=TokenClass.ACCESS)


def test_expired_token_is_rejected(provider):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = provider.create_access_token(claims=CLAIMS, expires_delta=timedelta(minutes=5))
        assert provider.decode(token, token_class=TokenClass.ACCESS)["sub"] == "1"

        frozen.tick(timedelta(minutes=6))

        with pytest.raises(InvalidTokenError, match="expired"):
            provider.decode(token, token_class=TokenClass.ACCESS)
