"""
SQLAlchemyIdentityProvider
==========================

Identity provider backed by the ``users`` table:
- Account creation with email uniqueness
- Lookup by email (with credential) and by id
- Password comparison (verification only, no token issuance)
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash

from session_tokens.core.constants import Role
from session_tokens.models.user import User
from session_tokens.repositories.user import UserRepository
from session_tokens.services._shared.base import BaseService
from session_tokens.services._shared.errors import DuplicateEmailError, violates
from session_tokens.services._shared.ports.identity_provider import IdentityProvider
from session_tokens.services.identity.dto import Identity, IdentityCreateIn, IdentityCredential


def _to_identity(user: User) -> Identity:
    return Identity(
        id=user.id,
        role=Role(user.role),
        tenant_id=user.tenant_id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )


class SQLAlchemyIdentityProvider(BaseService, IdentityProvider):
    """
    Application service for the `User` aggregate, exposed through the
    :class:`~session_tokens.services._shared.ports.IdentityProvider` port.
    """

    # --------------------------------------------------------------------- #
    # Creation
    # --------------------------------------------------------------------- #

    def create_identity(self, fields: IdentityCreateIn, role: Role) -> Identity:
        """
        Register a new identity.

        :param fields: Identity creation input DTO.
        :type fields: IdentityCreateIn
        :param role: Role to assign.
        :type role: Role
        :returns: Public-safe identity DTO.
        :rtype: Identity
        :raises DuplicateEmailError: When the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(fields.email):
                raise DuplicateEmailError(fields.email)

            try:
                user = repo.add(
                    User(
                        first_name=fields.first_name,
                        last_name=fields.last_name,
                        email=fields.email,
                        password=fields.password,  # model hashes via setter
                        role=role,
                        tenant_id=fields.tenant_id,
                    )
                )
            except IntegrityError as exc:
                # lost a race against a concurrent registration
                if violates(exc, "uq_users_email"):
                    raise DuplicateEmailError(fields.email) from exc
                raise

            return _to_identity(user)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def find_by_email_with_credential(self, email: str) -> IdentityCredential | None:
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                return None
            return IdentityCredential(identity=_to_identity(user), password_hash=user.password_hash)

    def find_by_id(self, identity_id: int | str) -> Identity | None:
        """
        Resolve an identity by id.

        Token subjects are strings; non-numeric values simply do not match.
        """
        try:
            key = int(identity_id)
        except (TypeError, ValueError):
            return None
        with self.ro_uow() as uow:
            user = uow.users.get(key)
            return _to_identity(user) if user is not None else None

    # --------------------------------------------------------------------- #
    # Credentials
    # --------------------------------------------------------------------- #

    def compare_password(self, plain: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        return bool(check_password_hash(password_hash, plain))
