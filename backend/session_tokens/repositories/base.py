"""Persistence-only repository base shared by the user and refresh-token repositories.

Repositories read and stage writes on the session of the unit of work that
created them. They never commit or roll back.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

E = TypeVar("E")  # mapped model


class BaseRepository(Generic[E]):
    """Lookups and staged writes for one mapped model.

    Subclasses set :attr:`model`; it must expose an ``id`` primary key.
    """

    model: ClassVar[type[Any]]

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned.

        :raises sqlalchemy.exc.IntegrityError: When a constraint is violated.
        """
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        stmt = select(self.model).where(self.model.id == entity_id)
        return self.session.execute(stmt).scalars().first()

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
