"""Tests for UserRepository."""

from __future__ import annotations

import pytest

from session_tokens.repositories import UserRepository
from tests.factories.user import UserFactory


@pytest.fixture()
def repo(session) -> UserRepository:
    return UserRepository(session)


def test_add_assigns_primary_key(repo):
    user = repo.add(UserFactory.build())

    assert user.id is not None
    assert repo.get(user.id) is user


def test_get_by_email_ignores_case_and_whitespace(repo):
    user = UserFactory(email="alice@example.com")

    assert repo.get_by_email("  Alice@Example.com ") is user
    assert repo.get_by_email("nobody@example.com") is None


def test_exists_by_email(repo):
    UserFactory(email="bob@example.com")

    assert repo.exists_by_email("BOB@example.com")
    assert not repo.exists_by_email("nonexistent@example.com")


def test_delete_removes_user(repo, session):
    user = UserFactory()
    user_id = user.id

    repo.delete(user)
    session.commit()

    assert repo.get(user_id) is None
