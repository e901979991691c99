"""
TokenService
============

Issues and verifies the two token classes:

- Access tokens: stateless, short-lived, signed with the shared secret.
- Refresh tokens: backed by a server-side record, long-lived, signed with the
  RSA private key. Deleting the record revokes the token.
"""

from __future__ import annotations

from typing import Any

from marshmallow import ValidationError

from session_tokens.core.keys import TokenClass
from session_tokens.schemas.claims import load_claims
from session_tokens.services._shared.base import BaseService
from session_tokens.services._shared.errors import InvalidTokenError
from session_tokens.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
)
from session_tokens.services._shared.ports.token_provider import TokenProvider
from session_tokens.services.tokens.dto import AuthTokenConfig, Claims, RefreshClaims


class TokenService(BaseService):
    """
    Token issuer.

    Holds no per-request state: the provider carries the key material, the
    store carries the refresh-token records.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for signing/verifying JWTs.
        :param refresh_store: Store of refresh-token records.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        super().__init__()
        self.tokens = token_provider
        self.refresh_store = refresh_store
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue_access_token(self, claims: Claims) -> str:
        return self.tokens.create_access_token(
            claims=claims.to_payload(),
            expires_delta=self.cfg.access_expires,
        )

    def persist_refresh_token(self, owner_identity_id: int | str) -> RefreshTokenRecord:
        """
        Create the record backing a refresh token.

        Must run before :meth:`issue_refresh_token`: a signed refresh token
        always has a record behind it.

        :raises StoreUnavailableError: When the store cannot be reached.
        """
        return self.refresh_store.create(str(owner_identity_id))

    def issue_refresh_token(self, claims: Claims, record_id: str) -> str:
        """
        Sign a refresh token for an already persisted record.

        The record id travels both as ``id`` and as ``jti``.
        """
        payload = claims.to_payload()
        payload["id"] = str(record_id)
        return self.tokens.create_refresh_token(
            claims=payload,
            expires_delta=self.cfg.refresh_expires,
            jti=str(record_id),
        )

    def revoke_refresh_token(self, record_id: str) -> bool:
        """
        Delete the record behind a refresh token.

        :returns: ``True`` if the record existed. A missing id is not an error.
        """
        return self.refresh_store.delete_by_id(str(record_id))

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify_access_token(self, token: str) -> Claims:
        """
        :raises InvalidTokenError: On bad signature, expiry, issuer, type or claims.
        """
        payload = self.tokens.decode(token, token_class=TokenClass.ACCESS)
        return self._claims_from(payload)

    def verify_refresh_token(self, token: str, *, check_revoked: bool = True) -> RefreshClaims:
        """
        Verify a refresh token and optionally check its record still exists.

        :param check_revoked: When ``True`` a token whose record was deleted
            (rotated away or logged out) is rejected.
        :raises InvalidTokenError: On any verification failure.
        """
        payload = self.tokens.decode(token, token_class=TokenClass.REFRESH)
        record_id = payload.get("id")
        if not record_id or str(record_id) != str(payload.get("jti")):
            raise InvalidTokenError("Refresh token does not reference a record.")
        claims = self._claims_from(payload)
        if check_revoked and self.refresh_store.get(str(record_id)) is None:
            raise InvalidTokenError("Refresh token has been revoked.")
        return RefreshClaims(claims=claims, record_id=str(record_id))

    @staticmethod
    def _claims_from(payload: dict[str, Any]) -> Claims:
        try:
            return Claims.from_fields(load_claims(payload))
        except ValidationError as exc:
            raise InvalidTokenError("Token claims are malformed.") from exc
