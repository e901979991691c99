"""Unit tests for the ``User`` and ``RefreshToken`` models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from session_tokens.core.constants import Role
from session_tokens.models import RefreshToken, User
from tests.factories.user import TenantFactory, UserFactory


def test_password_is_write_only_and_hashed():
    user = User(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    user.password = "s3cret"

    assert user.password_hash != "s3cret"
    assert user.verify_password("s3cret")
    assert not user.verify_password("wrong")
    with pytest.raises(AttributeError):
        _ = user.password


def test_empty_password_is_rejected():
    user = User(first_name="Ada", last_name="Lovelace", email="ada@example.com")

    with pytest.raises(ValueError):
        user.password = ""


def test_email_and_names_are_normalized():
    user = User(first_name="  Ada ", last_name=" Lovelace", email="  ADA@Example.COM ")

    assert user.email == "ada@example.com"
    assert user.first_name == "Ada"
    assert user.last_name == "Lovelace"


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@localhost"])
def test_malformed_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(first_name="Ada", last_name="Lovelace", email=email)


def test_role_defaults_to_customer_and_tenant_is_optional(session):
    user = UserFactory(role=Role.CUSTOMER)

    assert user.role is Role.CUSTOMER
    assert user.tenant is None


def test_user_belongs_to_tenant(session):
    tenant = TenantFactory(name="Acme")
    user = UserFactory(tenant=tenant)

    assert user.tenant_id == tenant.id
    assert tenant.users == [user]


def test_refresh_token_links_to_user(session):
    user = UserFactory()
    token = RefreshToken(user_id=user.id, expires_at=datetime.now(UTC) + timedelta(days=1))
    session.add(token)
    session.commit()

    assert token.user is user
    assert user.refresh_tokens == [token]
