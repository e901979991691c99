"""
DTOs exchanged with the identity provider.

Data Transfer Objects (DTOs) isolate the token lifecycle from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

from session_tokens.core.constants import Role

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class IdentityCreateIn:
    """
    Input DTO for identity creation.

    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param email: Login email (normalized to lowercase by the provider).
    :type email: str
    :param password: Raw password to be hashed by the provider.
    :type password: str
    :param tenant_id: Optional tenant the identity belongs to.
    :type tenant_id: int | None
    """

    first_name: str
    last_name: str
    email: str
    password: str
    tenant_id: int | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Public-safe identity snapshot. Never carries credential data.

    :param id: Identity identifier.
    :type id: int
    :param role: Authorization role.
    :type role: Role
    :param tenant_id: Tenant reference, ``None`` when unscoped.
    :type tenant_id: int | None
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param email: Unique login email.
    :type email: str
    """

    id: int
    role: Role
    tenant_id: int | None
    first_name: str
    last_name: str
    email: str


@dataclass(frozen=True, slots=True)
class IdentityCredential:
    """
    Identity paired with its stored password hash (login only).

    :param identity: Resolved identity.
    :type identity: Identity
    :param password_hash: Stored hash to compare the candidate password with.
    :type password_hash: str
    """

    identity: Identity
    password_hash: str
