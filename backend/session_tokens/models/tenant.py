"""Tenant model: optional organisational scope for identities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from session_tokens.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class Tenant(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Organisation an identity may belong to.

    Its id travels in the ``tenant`` claim of every token issued for members.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)

    users: Mapped[list[User]] = relationship(back_populates="tenant")
