"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from session_tokens.repositories.base import BaseRepository
from session_tokens.repositories.refresh_token import RefreshTokenRepository
from session_tokens.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
