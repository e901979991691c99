"""Signing key material for access and refresh tokens.

Key material is loaded exactly once while the application factory runs and is
then passed by reference to the token provider. Each token class uses its own
key: access tokens are signed and verified with a shared secret (``HS256``),
refresh tokens are signed with an RSA private key and verified with the
matching public key (``RS256``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

#: Shortest accepted access secret, in bytes (HS256 output size).
MIN_SECRET_BYTES: Final[int] = 32


class SigningKeyUnavailableError(RuntimeError):
    """
    Raised when key material is absent or malformed.

    This is a configuration error: it is raised at process start and must stop
    the process instead of degrading into unsigned or weakly signed tokens.
    """


class TokenClass(str, Enum):
    """Kind of token, selecting its key pair and lifetime."""

    ACCESS = "access"
    REFRESH = "refresh"


_ALGORITHMS: Final[dict[TokenClass, str]] = {
    TokenClass.ACCESS: "HS256",
    TokenClass.REFRESH: "RS256",
}


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """
    Immutable key bundle for both token classes.

    :ivar access_secret: Symmetric secret used to sign and verify access tokens.
    :ivar refresh_private_key: RSA key used to sign refresh tokens.
    :ivar refresh_public_key: RSA key used to verify refresh tokens.
    """

    access_secret: str
    refresh_private_key: RSAPrivateKey
    refresh_public_key: RSAPublicKey

    def signing_key(self, token_class: TokenClass) -> str | RSAPrivateKey:
        """Return the key that signs tokens of ``token_class``."""
        if token_class is TokenClass.ACCESS:
            return self.access_secret
        return self.refresh_private_key

    def verification_key(self, token_class: TokenClass) -> str | RSAPublicKey:
        """Return the key that verifies tokens of ``token_class``."""
        if token_class is TokenClass.ACCESS:
            return self.access_secret
        return self.refresh_public_key

    @staticmethod
    def algorithm(token_class: TokenClass) -> str:
        """Return the JWS algorithm name for ``token_class``."""
        return _ALGORITHMS[token_class]

    def public_key_pem(self) -> str:
        """Serialize the refresh verification key so other services can verify."""
        return self.refresh_public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")


def _read_pem(inline: str | None, path: str | None, *, name: str) -> bytes | None:
    """Return PEM bytes from inline config text or from a file path."""
    if inline and inline.strip():
        # Env files often carry PEMs with escaped newlines
        return inline.strip().replace("\\n", "\n").encode("utf-8")
    if path:
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise SigningKeyUnavailableError(f"Cannot read {name} from {path!r}.") from exc
    return None


def _load_private_key(pem: bytes) -> RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningKeyUnavailableError("Refresh token private key is malformed.") from exc
    if not isinstance(key, RSAPrivateKey):
        raise SigningKeyUnavailableError("Refresh token private key must be an RSA key.")
    return key


def _load_public_key(pem: bytes) -> RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningKeyUnavailableError("Refresh token public key is malformed.") from exc
    if not isinstance(key, RSAPublicKey):
        raise SigningKeyUnavailableError("Refresh token public key must be an RSA key.")
    return key


def load_key_material(config: Mapping[str, Any]) -> KeyMaterial:
    """
    Build :class:`KeyMaterial` from application configuration.

    Recognized keys
    ---------------
    ``ACCESS_TOKEN_SECRET``
        Shared secret for access tokens (at least 32 bytes).
    ``REFRESH_TOKEN_PRIVATE_KEY`` / ``REFRESH_TOKEN_PRIVATE_KEY_PATH``
        PEM-encoded RSA private key, inline or as a file path.
    ``REFRESH_TOKEN_PUBLIC_KEY`` / ``REFRESH_TOKEN_PUBLIC_KEY_PATH``
        Optional PEM public key; derived from the private key when omitted and
        required to match it when given.

    :param config: Flask config or any mapping.
    :returns: Loaded key material.
    :raises SigningKeyUnavailableError: When any key is absent or malformed.
    """
    secret = config.get("ACCESS_TOKEN_SECRET")
    if not isinstance(secret, str) or not secret.strip():
        raise SigningKeyUnavailableError("ACCESS_TOKEN_SECRET is not configured.")
    if len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
        raise SigningKeyUnavailableError(
            f"ACCESS_TOKEN_SECRET must be at least {MIN_SECRET_BYTES} bytes long."
        )

    private_pem = _read_pem(
        config.get("REFRESH_TOKEN_PRIVATE_KEY"),
        config.get("REFRESH_TOKEN_PRIVATE_KEY_PATH"),
        name="refresh token private key",
    )
    if private_pem is None:
        raise SigningKeyUnavailableError("Refresh token private key is not configured.")
    private_key = _load_private_key(private_pem)

    public_pem = _read_pem(
        config.get("REFRESH_TOKEN_PUBLIC_KEY"),
        config.get("REFRESH_TOKEN_PUBLIC_KEY_PATH"),
        name="refresh token public key",
    )
    if public_pem is None:
        public_key = private_key.public_key()
    else:
        public_key = _load_public_key(public_pem)
        if public_key.public_numbers() != private_key.public_key().public_numbers():
            raise SigningKeyUnavailableError(
                "Refresh token public key does not match the private key."
            )

    return KeyMaterial(
        access_secret=secret,
        refresh_private_key=private_key,
        refresh_public_key=public_key,
    )


__all__ = [
    "KeyMaterial",
    "MIN_SECRET_BYTES",
    "SigningKeyUnavailableError",
    "TokenClass",
    "load_key_material",
]
