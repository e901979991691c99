# session_tokens/infra/jwt/jwt_token_provider.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from session_tokens.core.constants import DEFAULT_ISSUER
from session_tokens.core.keys import KeyMaterial, TokenClass
from session_tokens.services._shared.errors import InvalidTokenError
from session_tokens.services._shared.ports import TokenProvider

# Claims every token must carry to be accepted
REQUIRED_CLAIMS = ("exp", "iat", "iss", "sub", "type", "jti")


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for PyJWT.

    Access tokens are signed with the shared secret, refresh tokens with the
    RSA private key; :attr:`keys` decides which key and algorithm apply.

    :param keys: Key material loaded at startup.
    :param issuer: Value written to and required in the ``iss`` claim.
    :param leeway: Clock skew tolerated when checking ``exp``/``iat``.
    """

    keys: KeyMaterial
    issuer: str = DEFAULT_ISSUER
    leeway: timedelta = timedelta(seconds=0)

    def _encode(
        self,
        *,
        token_class: TokenClass,
        claims: Mapping[str, Any],
        expires_delta: timedelta,
        jti: str,
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = dict(claims)
        payload.update(
            {
                "iss": self.issuer,
                "iat": now,
                "nbf": now,
                "exp": now + expires_delta,
                "type": token_class.value,
                "jti": jti,
            }
        )
        token = jwt.encode(
            payload,
            self.keys.signing_key(token_class),
            algorithm=KeyMaterial.algorithm(token_class),
        )
        return cast(str, token)

    def create_access_token(
        self,
        *,
        claims: Mapping[str, Any],
        expires_delta: timedelta,
    ) -> str:
        return self._encode(
            token_class=TokenClass.ACCESS,
            claims=claims,
            expires_delta=expires_delta,
            jti=uuid4().hex,
        )

    def create_refresh_token(
        self,
        *,
        claims: Mapping[str, Any],
        expires_delta: timedelta,
        jti: str,
    ) -> str:
        # jti is the store record id, so the token can be matched to its record
        return self._encode(
            token_class=TokenClass.REFRESH,
            claims=claims,
            expires_delta=expires_delta,
            jti=jti,
        )

    def decode(self, token: str, *, token_class: TokenClass) -> dict[str, Any]:
        """
        Verify signature, expiry, issuer and token type.

        Only the algorithm of ``token_class`` is accepted, so an access token
        can never pass as a refresh token (or vice versa) even if forged with
        the other class' key.

        :raises InvalidTokenError: On any verification failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.keys.verification_key(token_class),
                algorithms=[KeyMaterial.algorithm(token_class)],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired.") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Invalid token.") from exc

        if payload.get("type") != token_class.value:
            raise InvalidTokenError(f"Wrong token type: {token_class.value} token required.")
        return cast(dict[str, Any], payload)
