"""User model: the identity every session belongs to."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from session_tokens.core.constants import Role
from session_tokens.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken
    from .tenant import Tenant


def _role_values(enum: type[Role]) -> list[str]:
    return [member.value for member in enum]


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account that can sign in.

    ``first_name``, ``last_name``, ``email``, ``role`` and ``tenant_id`` are
    copied into the claims of every token issued for the user. The password
    is only ever stored as a werkzeug hash and cannot be read back.
    """

    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", values_callable=_role_values, validate_strings=True),
        nullable=False,
        default=Role.CUSTOMER,
    )
    tenant_id: Mapped[int | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True
    )

    tenant: Mapped[Tenant | None] = relationship(back_populates="users")
    # rows go with the user; the FK cascade removes them in the database
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    @property
    def password(self) -> NoReturn:
        raise AttributeError("User.password is write-only; use verify_password().")

    @password.setter
    def password(self, raw: str) -> None:
        """Hash and store ``raw``.

        :raises ValueError: On an empty or non-string password.
        """
        if not raw or not isinstance(raw, str):
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Compare ``raw`` with the stored hash; ``False`` when no hash is set."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Store emails trimmed and lowercased.

        :raises ValueError: When the value does not look like ``local@domain.tld``.
        """
        email = (value or "").strip().lower() if isinstance(value, str) else ""
        local, sep, domain = email.partition("@")
        if not (local and sep and "." in domain):
            raise ValueError(f"Invalid email: {value!r}")
        return email

    @validates("first_name", "last_name")
    def _strip_name(self, key: str, value: str) -> str:
        name = value.strip() if isinstance(value, str) else ""
        if not name:
            raise ValueError(f"{key} is required.")
        return name
