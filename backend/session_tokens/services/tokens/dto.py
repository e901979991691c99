# session_tokens/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from session_tokens.core.constants import ACCESS_TOKEN_LIFETIME, REFRESH_TOKEN_LIFETIME, Role
from session_tokens.services.identity.dto import Identity

# ---------------------------- Claims -------------------------------------- #


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Identity snapshot embedded in every token.

    Built fresh from the identity at issuance time; claims are never carried
    over from an older token.

    :param sub: Identity id as a string.
    :type sub: str
    :param role: Authorization role.
    :type role: Role
    :param tenant: Tenant id as a string, ``""`` when the identity has none.
    :type tenant: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param email: Login email.
    :type email: str
    """

    sub: str
    role: Role
    tenant: str
    first_name: str
    last_name: str
    email: str

    @classmethod
    def from_identity(cls, identity: Identity) -> Claims:
        return cls(
            sub=str(identity.id),
            role=identity.role,
            tenant="" if identity.tenant_id is None else str(identity.tenant_id),
            first_name=identity.first_name,
            last_name=identity.last_name,
            email=identity.email,
        )

    @classmethod
    def from_fields(cls, data: dict[str, Any]) -> Claims:
        """Build claims from validated snake-cased fields."""
        return cls(
            sub=data["sub"],
            role=Role(data["role"]),
            tenant=data["tenant"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
        )

    def to_payload(self) -> dict[str, Any]:
        """Render the claims with their wire names."""
        return {
            "sub": self.sub,
            "role": self.role.value,
            "tenant": self.tenant,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """
    Verified refresh token contents.

    :param claims: Identity claims.
    :type claims: Claims
    :param record_id: Id of the backing refresh-token record.
    :type record_id: str
    """

    claims: Claims
    record_id: str


# ------------------------ Config DTO -------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta = ACCESS_TOKEN_LIFETIME
    refresh_expires: timedelta = REFRESH_TOKEN_LIFETIME
