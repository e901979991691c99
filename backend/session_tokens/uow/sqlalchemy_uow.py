"""
Units of work over the Flask-SQLAlchemy scoped session.
"""

from __future__ import annotations

import logging
from typing import Self

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from session_tokens.core.extensions import db
from session_tokens.repositories import RefreshTokenRepository, UserRepository
from session_tokens.uow.base import UnitOfWork

log = logging.getLogger(__name__)

# Dialects that understand SET TRANSACTION READ ONLY
_READ_ONLY_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class _Repositories:
    """Repositories bound to one session."""

    def __init__(self, session: Session | scoped_session[Session]) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.refresh_tokens = RefreshTokenRepository(session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-write unit of work.

    Commits on a clean exit, rolls back otherwise (see :class:`UnitOfWork`).
    """

    def __init__(self) -> None:
        super().__init__(db.session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def _refuse_flush(session: Session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError("Pending ORM changes inside a read-only unit of work.")


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-only unit of work.

    - Rolls back on exit, whatever happened; :meth:`commit` is refused.
    - Refuses ORM flushes that carry new, changed or deleted objects.
    - On PostgreSQL and MySQL/MariaDB the transaction is also marked
      ``READ ONLY`` by the database. SQLite has no such mode and relies on
      the flush guard alone.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._guarded: Session | None = None

    def __enter__(self) -> Self:
        # listen on the current session, not on the scoped_session registry
        target = self.session() if isinstance(self.session, scoped_session) else self.session
        event.listen(target, "before_flush", _refuse_flush)
        self._guarded = target
        if self.enforce_db_readonly and not target.in_transaction():
            self._mark_read_only(target)
        return self

    def _mark_read_only(self, session: Session) -> None:
        if session.get_bind().dialect.name not in _READ_ONLY_DIALECTS:
            return
        try:
            session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError:
            log.warning("Could not mark transaction read-only; relying on the flush guard")

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._guarded is not None:
                event.remove(self._guarded, "before_flush", _refuse_flush)
                self._guarded = None

    def commit(self) -> None:
        raise RuntimeError("A read-only unit of work cannot commit.")

    def rollback(self) -> None:
        self.session.rollback()
