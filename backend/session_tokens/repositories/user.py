"""User lookups by email."""

from __future__ import annotations

from sqlalchemy import exists, select

from session_tokens.models.user import User
from session_tokens.repositories.base import BaseRepository


def _normalize(email: str) -> str:
    # same normalization the model applies on write
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Data access for :class:`User`; knows nothing about tokens."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Return the user registered under ``email`` (any case), if any."""
        stmt = select(User).where(User.email == _normalize(email))
        return self.session.execute(stmt).scalars().first()

    def exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(User.email == _normalize(email)))
        return bool(self.session.execute(stmt).scalar())
