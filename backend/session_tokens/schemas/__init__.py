"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import IdentitySchema, LoginSchema, RegisterSchema, SessionResponseSchema
from .claims import ClaimsSchema, dump_claims, load_claims

__all__ = [
    "ClaimsSchema",
    "IdentitySchema",
    "LoginSchema",
    "RegisterSchema",
    "SessionResponseSchema",
    "dump_claims",
    "load_claims",
]
