"""Unit tests for :class:`SessionService` (register, login, refresh, logout)."""

from __future__ import annotations

import logging

import pytest

from session_tokens.core.constants import Role
from session_tokens.core.keys import TokenClass
from session_tokens.infra.jwt import JWTTokenProvider
from session_tokens.services._shared.errors import (
    DuplicateEmailError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    RefreshTokenReusedError,
    StoreUnavailableError,
)
from session_tokens.services._shared.ports import (
    InMemoryIdentityProvider,
    InMemoryRefreshTokenStore,
)
from session_tokens.services.session.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn
from session_tokens.services.session.service import SessionService
from session_tokens.services.tokens.service import TokenService

# --------------------------------------------------------------------------- #
# Fixtures
# --------------------------------------------------------------------------- #


class UnavailableStore(InMemoryRefreshTokenStore):
    """Store double whose backend is down."""

    def create(self, owner_id):
        raise StoreUnavailableError()


@pytest.fixture()
def identities() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def provider(key_material) -> JWTTokenProvider:
    return JWTTokenProvider(keys=key_material)


@pytest.fixture()
def service(identities, store, provider) -> SessionService:
    tokens = TokenService(token_provider=provider, refresh_store=store)
    return SessionService(identities=identities, tokens=tokens)


def _register(service, email="a@b.com", password="p1"):
    return service.register(
        RegisterIn(first_name="A", last_name="B", email=email, password=password)
    )


# --------------------------------------------------------------------------- #
# Register
# --------------------------------------------------------------------------- #


def test_register_creates_customer_and_first_session(service, identities, store, provider):
    out = _register(service)

    identity = identities.find_by_id(out.identity_id)
    assert identity.role is Role.CUSTOMER
    assert [r.id for r in store.records_for(str(out.identity_id))] == [out.record_id]

    refresh = provider.decode(out.tokens.refresh_token, token_class=TokenClass.REFRESH)
    access = provider.decode(out.tokens.access_token, token_class=TokenClass.ACCESS)
    assert refresh["id"] == out.record_id
    assert access["sub"] == refresh["sub"] == str(out.identity_id)
    assert access["role"] == "customer"


def test_register_duplicate_email_issues_nothing(service, store):
    first = _register(service)

    with pytest.raises(DuplicateEmailError):
        _register(service, email="A@B.com")
    assert len(store.records_for(str(first.identity_id))) == 1


def test_register_logs_without_password(service, caplog):
    with caplog.at_level(logging.DEBUG, logger="session_tokens.services.session.service"):
        _register(service, password="super-secret")

    assert "super-secret" not in caplog.text
    assert any(r.getMessage() == "User has been registered" for r in caplog.records)


# --------------------------------------------------------------------------- #
# Login
# --------------------------------------------------------------------------- #


def test_login_starts_a_new_session(service, store):
    registered = _register(service)

    out = service.login(LoginIn(email="a@b.com", password="p1"))

    assert out.identity_id == registered.identity_id
    assert out.record_id != registered.record_id
    assert len(store.records_for(str(out.identity_id))) == 2


def test_login_failures_are_indistinguishable(service):
    _register(service)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        service.login(LoginIn(email="a@b.com", password="nope"))
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        service.login(LoginIn(email="x@b.com", password="p1"))

    assert str(wrong_password.value) == str(unknown_email.value)


# --------------------------------------------------------------------------- #
# Refresh
# --------------------------------------------------------------------------- #


def test_refresh_rotates_the_record(service, store, provider):
    first = _register(service)

    rotated = service.refresh(
        RefreshIn(identity_id=str(first.identity_id), record_id=first.record_id)
    )

    assert rotated.record_id != first.record_id
    assert store.get(first.record_id) is None
    assert store.get(rotated.record_id) is not None
    payload = provider.decode(rotated.tokens.refresh_token, token_class=TokenClass.REFRESH)
    assert payload["id"] == rotated.record_id


def test_refresh_for_deleted_identity_fails(service, identities):
    first = _register(service)
    identities.delete(first.identity_id)

    with pytest.raises(IdentityNotFoundError):
        service.refresh(RefreshIn(identity_id=str(first.identity_id), record_id=first.record_id))


def test_refresh_with_consumed_record_revokes_new_one(service, store):
    first = _register(service)
    dto = RefreshIn(identity_id=str(first.identity_id), record_id=first.record_id)
    service.refresh(dto)

    with pytest.raises(RefreshTokenReusedError):
        service.refresh(dto)

    # only the record from the winning rotation survives
    assert len(store.records_for(str(first.identity_id))) == 1


def test_refresh_after_logout_is_rejected(service, store):
    first = _register(service)
    service.logout(LogoutIn(record_id=first.record_id))

    with pytest.raises(RefreshTokenReusedError):
        service.refresh(RefreshIn(identity_id=str(first.identity_id), record_id=first.record_id))
    assert store.records_for(str(first.identity_id)) == []


# --------------------------------------------------------------------------- #
# Logout
# --------------------------------------------------------------------------- #


def test_logout_twice_is_not_an_error(service, store):
    first = _register(service)

    service.logout(LogoutIn(record_id=first.record_id))
    service.logout(LogoutIn(record_id=first.record_id))

    assert store.get(first.record_id) is None


def test_logout_leaves_other_sessions_alone(service, store):
    first = _register(service)
    second = service.login(LoginIn(email="a@b.com", password="p1"))

    service.logout(LogoutIn(record_id=first.record_id))

    assert store.get(second.record_id) is not None


# --------------------------------------------------------------------------- #
# Store outage
# --------------------------------------------------------------------------- #


def test_store_outage_aborts_issuance(identities, provider):
    tokens = TokenService(token_provider=provider, refresh_store=UnavailableStore())
    service = SessionService(identities=identities, tokens=tokens)

    with pytest.raises(StoreUnavailableError):
        _register(service)


class FailingDeleteStore(InMemoryRefreshTokenStore):
    """Store double whose deletes fail with an outage."""

    def delete_by_id(self, record_id):
        raise StoreUnavailableError()


def test_store_outage_during_rotation_keeps_old_record(identities, provider, caplog):
    store = FailingDeleteStore()
    service = SessionService(
        identities=identities,
        tokens=TokenService(token_provider=provider, refresh_store=store),
    )
    first = _register(service)

    with caplog.at_level(logging.WARNING, logger="session_tokens.services.session.service"):
        with pytest.raises(StoreUnavailableError):
            service.refresh(
                RefreshIn(identity_id=str(first.identity_id), record_id=first.record_id)
            )

    assert store.get(first.record_id) is not None
    assert len(store.records_for(str(first.identity_id))) == 2
    assert any("left unreferenced" in r.getMessage() for r in caplog.records)


# --------------------------------------------------------------------------- #
# Who am I
# --------------------------------------------------------------------------- #


def test_whoami(service, identities):
    first = _register(service)

    assert service.whoami(str(first.identity_id)).email == "a@b.com"

    identities.delete(first.identity_id)
    with pytest.raises(IdentityNotFoundError):
        service.whoami(first.identity_id)


# --------------------------------------------------------------------------- #
# End to end
# --------------------------------------------------------------------------- #


def test_register_refresh_logout_lifecycle(service, store, provider):
    """Register a@b.com, rotate once, then log out."""

    registered = _register(service)
    owner = str(registered.identity_id)

    access = provider.decode(registered.tokens.access_token, token_class=TokenClass.ACCESS)
    assert access["role"] == "customer"
    assert access["tenant"] == ""
    assert store.get(registered.record_id).owner_id == owner

    rotated = service.refresh(RefreshIn(identity_id=owner, record_id=registered.record_id))
    assert store.get(registered.record_id) is None
    assert rotated.record_id != registered.record_id
    assert store.get(rotated.record_id).owner_id == owner

    service.logout(LogoutIn(record_id=rotated.record_id))
    assert store.get(rotated.record_id) is None
    assert store.records_for(owner) == []
