"""Base class giving services their transaction boundaries and clock."""

from __future__ import annotations

from datetime import UTC, datetime

from session_tokens.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base for services backed by the database.

    Notes
    -----
    - Every database access goes through a unit of work; services never touch
      the Flask-SQLAlchemy session directly.
    - Errors propagate unchanged; ``core.errors`` maps them to HTTP.
    """

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Unit of work that commits when its block exits cleanly."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Unit of work that always rolls back and refuses ORM writes.

        :param enforce_db_readonly: Also issue ``SET TRANSACTION READ ONLY``
            where the database supports it.
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
