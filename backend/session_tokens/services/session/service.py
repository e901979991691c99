"""
SessionService
==============

Use-case layer for the session lifecycle: register, login, refresh
(rotation) and logout. Sequences identity-provider calls with token-issuer
calls; every flow is request-scoped.
"""

from __future__ import annotations

import logging

from session_tokens.core.constants import Role
from session_tokens.core.logger import MASK
from session_tokens.services._shared.base import BaseService
from session_tokens.services._shared.errors import (
    IdentityNotFoundError,
    InvalidCredentialsError,
    RefreshTokenReusedError,
    StoreUnavailableError,
)
from session_tokens.services._shared.ports.identity_provider import IdentityProvider
from session_tokens.services.identity.dto import Identity, IdentityCreateIn
from session_tokens.services.session.dto import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    SessionOut,
    TokenPairOut,
)
from session_tokens.services.tokens.dto import Claims
from session_tokens.services.tokens.service import TokenService

logger = logging.getLogger(__name__)


class SessionService(BaseService):
    """
    Session orchestrator.

    Errors from the identity provider and the token issuer propagate
    unchanged, except that both login failure causes collapse into one
    :class:`InvalidCredentialsError`.
    """

    def __init__(self, *, identities: IdentityProvider, tokens: TokenService) -> None:
        super().__init__()
        self.identities = identities
        self.tokens = tokens

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create a customer identity and start its first session.

        :raises DuplicateEmailError: When the email is taken. No tokens are issued.
        :raises StoreUnavailableError: When the record cannot be persisted.
        """
        logger.debug(
            "New request to register a user",
            extra={"email": dto.email, "password": MASK},
        )
        identity = self.identities.create_identity(
            IdentityCreateIn(
                first_name=dto.first_name,
                last_name=dto.last_name,
                email=dto.email,
                password=dto.password,
            ),
            Role.CUSTOMER,
        )
        logger.info("User has been registered", extra={"user_id": identity.id})
        return self._start_session(identity)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and start a session.

        :raises InvalidCredentialsError: Unknown email or wrong password, indistinguishably.
        """
        logger.debug("New request to login", extra={"email": dto.email, "password": MASK})
        found = self.identities.find_by_email_with_credential(dto.email)
        if found is None:
            logger.debug("Login rejected", extra={"email": dto.email})
            raise InvalidCredentialsError()
        if not self.identities.compare_password(dto.password, found.password_hash):
            logger.debug("Login rejected", extra={"email": dto.email})
            raise InvalidCredentialsError()

        session = self._start_session(found.identity)
        logger.info("User has been logged in", extra={"user_id": found.identity.id})
        return session

    # ------------------------------------------------------------------ #
    # Refresh (rotation)
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> SessionOut:
        """
        Rotate the caller's refresh token.

        The new record is created before the old one is deleted. If the old
        record turns out to be gone already, a concurrent rotation or logout
        won: the new record is revoked as well and the call fails. If the
        store goes down between the two steps, the new record stays behind
        unreferenced until it expires, and the old token keeps working.

        :raises IdentityNotFoundError: The identity was deleted since issuance.
        :raises RefreshTokenReusedError: The old record was already deleted.
        :raises StoreUnavailableError: The store failed; no token is issued.
        """
        identity = self.identities.find_by_id(dto.identity_id)
        if identity is None:
            raise IdentityNotFoundError(dto.identity_id)

        claims = Claims.from_identity(identity)
        access = self.tokens.issue_access_token(claims)

        record = self.tokens.persist_refresh_token(identity.id)
        try:
            revoked = self.tokens.revoke_refresh_token(dto.record_id)
        except StoreUnavailableError:
            # no token references the new record; it expires with its TTL
            logger.warning(
                "Rotation aborted, new refresh token record left unreferenced",
                extra={"user_id": identity.id, "record_id": record.id},
            )
            raise
        if not revoked:
            self.tokens.revoke_refresh_token(record.id)
            logger.warning(
                "Refresh token reuse detected",
                extra={"user_id": identity.id, "record_id": dto.record_id},
            )
            raise RefreshTokenReusedError()

        refresh = self.tokens.issue_refresh_token(claims, record.id)
        logger.info(
            "Refresh token has been rotated",
            extra={"user_id": identity.id, "record_id": record.id},
        )
        return SessionOut(
            identity_id=identity.id,
            record_id=record.id,
            tokens=TokenPairOut(access_token=access, refresh_token=refresh),
        )

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Revoke the session's record. Calling it twice is not an error."""
        deleted = self.tokens.revoke_refresh_token(dto.record_id)
        logger.info(
            "Refresh token has been deleted",
            extra={"record_id": dto.record_id, "deleted": deleted},
        )
        logger.info("User has been logged out")

    # ------------------------------------------------------------------ #
    # Who am I
    # ------------------------------------------------------------------ #

    def whoami(self, identity_id: int | str) -> Identity:
        """
        Return the identity behind an access token.

        :raises IdentityNotFoundError: The identity no longer exists.
        """
        identity = self.identities.find_by_id(identity_id)
        if identity is None:
            raise IdentityNotFoundError(identity_id)
        return identity

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _start_session(self, identity: Identity) -> SessionOut:
        # record first: the refresh token embeds its id
        claims = Claims.from_identity(identity)
        record = self.tokens.persist_refresh_token(identity.id)
        refresh = self.tokens.issue_refresh_token(claims, record.id)
        access = self.tokens.issue_access_token(claims)
        return SessionOut(
            identity_id=identity.id,
            record_id=record.id,
            tokens=TokenPairOut(access_token=access, refresh_token=refresh),
        )
