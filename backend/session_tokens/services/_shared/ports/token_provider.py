from __future__ import annotations

import itertools
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from session_tokens.core.keys import TokenClass
from session_tokens.services._shared.errors import InvalidTokenError


class TokenProvider(Protocol):
    """Port for signing and verifying JWTs, one key pair per token class."""

    def create_access_token(self, *, claims: Mapping[str, Any], expires_delta: timedelta) -> str:
        """Sign a stateless access token; the provider picks a fresh ``jti``."""
        ...

    def create_refresh_token(
        self, *, claims: Mapping[str, Any], expires_delta: timedelta, jti: str
    ) -> str:
        """Sign a refresh token whose ``jti`` is the backing record id."""
        ...

    def decode(self, token: str, *, token_class: TokenClass) -> dict[str, Any]:
        """
        Verify and decode ``token``.

        :raises InvalidTokenError: On bad signature, expiry, issuer or token type.
        """
        ...


class StubTokenProvider(TokenProvider):
    """
    Unsigned token provider for unit tests.

    Tokens are opaque handles (``<class>.<sub>.<n>``) into an in-memory table
    of payloads, so tests can inspect exactly what would have been signed.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._payloads: dict[str, dict[str, Any]] = {}

    def _issue(
        self,
        token_class: TokenClass,
        claims: Mapping[str, Any],
        expires_delta: timedelta,
        jti: str,
    ) -> str:
        n = next(self._counter)
        now = datetime.now(UTC)
        handle = f"{token_class.value}.{claims.get('sub')}.{n}"
        self._payloads[handle] = {
            **claims,
            "type": token_class.value,
            "jti": jti or f"stub-{n}",
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        }
        return handle

    def create_access_token(self, *, claims: Mapping[str, Any], expires_delta: timedelta) -> str:
        return self._issue(TokenClass.ACCESS, claims, expires_delta, "")

    def create_refresh_token(
        self, *, claims: Mapping[str, Any], expires_delta: timedelta, jti: str
    ) -> str:
        return self._issue(TokenClass.REFRESH, claims, expires_delta, jti)

    def decode(self, token: str, *, token_class: TokenClass) -> dict[str, Any]:
        payload = self._payloads.get(token)
        if payload is None:
            raise InvalidTokenError("Unknown token.")
        if payload["type"] != token_class.value:
            raise InvalidTokenError(f"Wrong token type: {token_class.value} token required.")
        if payload["exp"] <= datetime.now(UTC).timestamp():
            raise InvalidTokenError("Token has expired.")
        return dict(payload)
