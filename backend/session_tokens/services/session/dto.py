"""Inputs and results of the session flows.

Passwords arrive raw in :class:`RegisterIn` and :class:`LoginIn` and are only
ever hashed or compared by the identity provider.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RegisterIn:
    first_name: str
    last_name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """What a verified refresh token says about itself.

    ``identity_id`` is the token's ``sub``; ``record_id`` is its ``jti``, the
    id of the store record that keeps the token alive.
    """

    identity_id: str
    record_id: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    record_id: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """Encoded access and refresh JWTs, ready for cookie delivery."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class SessionOut:
    """A session that was just started or rotated.

    :param identity_id: Owner of the session.
    :param record_id: Store record backing ``tokens.refresh_token``.
    :param tokens: The pair handed to the client.
    """

    identity_id: int
    record_id: str
    tokens: TokenPairOut
