from __future__ import annotations

import threading
from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash

from session_tokens.core.constants import Role
from session_tokens.services._shared.errors import DuplicateEmailError
from session_tokens.services.identity.dto import Identity, IdentityCreateIn, IdentityCredential


class IdentityProvider(Protocol):
    """
    Port to the collaborator owning account data and password verification.

    Lookups return ``None`` on absence instead of raising, so callers handle
    "not found" explicitly.
    """

    def create_identity(self, fields: IdentityCreateIn, role: Role) -> Identity:
        """
        Persist a new identity.

        :raises DuplicateEmailError: When the email is already registered.
        """
        ...

    def find_by_email_with_credential(self, email: str) -> IdentityCredential | None: ...

    def find_by_id(self, identity_id: int | str) -> Identity | None: ...

    def compare_password(self, plain: str, password_hash: str) -> bool: ...


class InMemoryIdentityProvider(IdentityProvider):
    """Dictionary-backed identity provider used in unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[int, IdentityCredential] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def create_identity(self, fields: IdentityCreateIn, role: Role) -> Identity:
        email = fields.email.strip().lower()
        with self._lock:
            if any(c.identity.email == email for c in self._by_id.values()):
                raise DuplicateEmailError(email)
            self._seq += 1
            identity = Identity(
                id=self._seq,
                role=role,
                tenant_id=fields.tenant_id,
                first_name=fields.first_name,
                last_name=fields.last_name,
                email=email,
            )
            self._by_id[identity.id] = IdentityCredential(
                identity=identity,
                password_hash=generate_password_hash(fields.password),
            )
            return identity

    def find_by_email_with_credential(self, email: str) -> IdentityCredential | None:
        email = email.strip().lower()
        for cred in self._by_id.values():
            if cred.identity.email == email:
                return cred
        return None

    def find_by_id(self, identity_id: int | str) -> Identity | None:
        try:
            key = int(identity_id)
        except (TypeError, ValueError):
            return None
        cred = self._by_id.get(key)
        return cred.identity if cred else None

    def compare_password(self, plain: str, password_hash: str) -> bool:
        return bool(check_password_hash(password_hash, plain))

    def delete(self, identity_id: int) -> None:
        """Drop an identity (simulates account deletion in tests)."""
        with self._lock:
            self._by_id.pop(int(identity_id), None)
