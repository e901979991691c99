"""factory_boy base class bound to the session of the running test."""

from __future__ import annotations

import factory

_bound_session = None


def bind_session(session) -> None:
    """Point every factory at ``session`` (called by the ``session`` fixture)."""
    global _bound_session
    _bound_session = session


def _current_session():
    if _bound_session is None:
        raise RuntimeError("No session bound to the factories; request the 'session' fixture.")
    return _bound_session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_factory = _current_session
        # read-only units of work roll back rows that were only flushed
        sqlalchemy_session_persistence = "commit"
