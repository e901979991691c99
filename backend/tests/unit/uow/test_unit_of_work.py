"""Tests for the read-write and read-only SQLAlchemy units of work."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from session_tokens.models import User
from session_tokens.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


def _count_users(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_clean_exit(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        assert _count_users(session) == 1

    def test_rolls_back_when_the_block_raises(self, session):
        with pytest.raises(RuntimeError, match="boom"), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert _count_users(session) == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        user = UserFactory(email="reader@example.com")

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            found = uow.users.get_by_email("reader@example.com")

        assert found is not None
        assert found.id == user.id

    def test_refuses_orm_flush(self, session):
        with pytest.raises(RuntimeError, match="read-only"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.session.add(UserFactory.build())
            uow.session.flush()

        assert _count_users(session) == 0

    def test_refuses_commit(self, session):
        with pytest.raises(RuntimeError, match="cannot commit"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.commit()

    def test_discards_changes_on_exit(self, session):
        user = UserFactory(first_name="Grace")

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.users.get(user.id).first_name = "Changed"

        assert session.get(User, user.id).first_name == "Grace"

    def test_flush_guard_is_removed_on_exit(self, session):
        with SQLAlchemyReadOnlyUnitOfWork():
            pass

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        assert _count_users(session) == 1

    def test_enters_on_a_session_without_a_transaction(self, session):
        session.remove()

        with SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=True) as uow:
            assert uow.users.get_by_email("nobody@example.com") is None
