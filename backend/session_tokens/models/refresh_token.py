"""Refresh token record model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from session_tokens.core.extensions import db

from .base import ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(ReprMixin, TimestampMixin, db.Model):
    """
    Server-side record backing one issued refresh token.

    The row id is embedded in the refresh JWT (``id`` and ``jti`` claims);
    deleting the row revokes the token. ``sqlite_autoincrement`` keeps SQLite
    from handing out the id of a deleted row again.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
        {"sqlite_autoincrement": True},
    )
