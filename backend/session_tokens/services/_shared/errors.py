"""
Errors raised by the identity provider, the refresh-token store, the token
issuer and the session flows.

Nothing here knows about HTTP; ``session_tokens.core.errors`` maps each type
to a status code and a stable ``code`` string.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Tell whether ``exc`` was caused by the named constraint.

    PostgreSQL reports the constraint name; SQLite only reports the columns
    (``UNIQUE constraint failed: users.email``), so ``uq_<table>_<column>``
    names are also matched against ``<table>.<column>``.

    :param exc: Error raised on flush or commit.
    :param constraint_name: Constraint name, e.g. ``uq_users_email``.
    :returns: ``True`` on a match.
    """
    text = str(exc.orig).lower() if exc.orig is not None else ""
    name = constraint_name.lower()
    if name in text:
        return True
    prefix, _, rest = name.partition("_")
    table, _, column = rest.partition("_")
    return prefix == "uq" and bool(column) and f"{table}.{column}" in text


class ServiceError(Exception):
    """Root of every error the token lifecycle reports to its callers."""


# ----------------------------- Identity ------------------------------------ #


class DuplicateEmailError(ServiceError):
    """The email is already registered; no identity and no tokens were created."""

    def __init__(self, email: str) -> None:
        super().__init__("A user with this email already exists.")
        self.email = email


class InvalidCredentialsError(ServiceError):
    """
    Login failed.

    Unknown email and wrong password share this type and message so callers
    cannot tell which emails are registered.
    """

    MESSAGE = "Email or password does not match."

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class IdentityNotFoundError(ServiceError):
    """The identity behind a still-valid token was deleted; sign in again."""

    def __init__(self, identity_id: str | int) -> None:
        super().__init__(f"User not found: {identity_id}")
        self.identity_id = identity_id


# ------------------------------ Tokens ------------------------------------- #


class StoreUnavailableError(ServiceError):
    """The refresh-token store could not be reached; nothing was persisted."""

    def __init__(self, message: str = "Refresh token store is unavailable.") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """A presented token failed signature, expiry, issuer, type or revocation checks."""

    def __init__(self, message: str = "Invalid token.") -> None:
        super().__init__(message)


class RefreshTokenReusedError(InvalidTokenError):
    """
    A rotation found its old record already deleted.

    A concurrent rotation or a logout consumed the token first. The record
    created by the losing call has been revoked as well.
    """

    def __init__(self) -> None:
        super().__init__("Refresh token has already been used. Please sign in again.")
