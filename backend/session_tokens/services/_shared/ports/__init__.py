"""
Ports the token lifecycle depends on, plus the in-memory doubles used by the
unit tests.

- :class:`TokenProvider`: signs and decodes JWTs (PyJWT adapter in
  ``session_tokens.infra.jwt``).
- :class:`RefreshTokenStore`: server-side records backing refresh tokens
  (SQL and Redis adapters in ``session_tokens.infra``).
- :class:`IdentityProvider`: account creation, lookup and password
  comparison (SQL adapter in ``session_tokens.services.identity``).
"""

from __future__ import annotations

from .identity_provider import IdentityProvider, InMemoryIdentityProvider
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "IdentityProvider",
    "InMemoryIdentityProvider",
    "InMemoryRefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "StubTokenProvider",
    "TokenProvider",
]
