"""Service layer public API.

This package exposes the building blocks of the token lifecycle so that
callers can import from :mod:`session_tokens.services` without knowing the
internal structure.

Re-exports
----------
- Base primitives (from ``session_tokens.services._shared.base``)
    * :class:`BaseService`

- Identity provider (from ``session_tokens.services.identity``)
    * :class:`SQLAlchemyIdentityProvider`
    * DTOs: :class:`Identity`, :class:`IdentityCredential`, :class:`IdentityCreateIn`

- Token issuer (from ``session_tokens.services.tokens``)
    * :class:`TokenService`
    * DTOs: :class:`Claims`, :class:`RefreshClaims`, :class:`AuthTokenConfig`

- Session orchestrator (from ``session_tokens.services.session``)
    * :class:`SessionService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`TokenPairOut`, :class:`SessionOut`
"""

from __future__ import annotations

# Base primitive
from ._shared.base import BaseService

# DTOs first: the ports depend on them
from .identity.dto import Identity, IdentityCreateIn, IdentityCredential

# Identity provider
from .identity.service import SQLAlchemyIdentityProvider
from .session.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn, SessionOut, TokenPairOut

# Session orchestrator
from .session.service import SessionService
from .tokens.dto import AuthTokenConfig, Claims, RefreshClaims

# Token issuer
from .tokens.service import TokenService

__all__ = [
    # Base
    "BaseService",
    # Identity
    "SQLAlchemyIdentityProvider",
    "Identity",
    "IdentityCreateIn",
    "IdentityCredential",
    # Tokens
    "TokenService",
    "AuthTokenConfig",
    "Claims",
    "RefreshClaims",
    # Session
    "SessionService",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    "SessionOut",
]
