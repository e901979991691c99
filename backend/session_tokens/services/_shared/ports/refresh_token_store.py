from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from session_tokens.core.constants import REFRESH_TOKEN_LIFETIME


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Server-side record backing exactly one issued refresh token.

    Records are immutable: they are created once and deleted to revoke.

    :ivar id: Store-assigned identifier, embedded in the refresh JWT.
    :ivar owner_id: Identity id owning the session.
    :ivar expires_at: Absolute expiration (UTC).
    """

    id: str
    owner_id: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(UTC))


class RefreshTokenStore(Protocol):
    """
    Durable mapping from a record id to its owner and expiry.

    Adapters MUST raise :class:`~session_tokens.services._shared.errors.StoreUnavailableError`
    when the backend cannot be reached, and MUST NOT reuse ids after deletion.
    """

    def create(self, owner_id: str) -> RefreshTokenRecord:
        """
        Allocate a new id, set ``expires_at = now + ttl`` and persist.

        This MUST be executed *before* the refresh JWT is signed.
        """

    def delete_by_id(self, record_id: str) -> bool:
        """
        Delete a record. Missing ids are not an error.

        :returns: ``True`` if a record was actually removed.
        """

    def get(self, record_id: str) -> RefreshTokenRecord | None:
        """Fetch a record snapshot (if present)."""

    def purge_expired(self, now: datetime) -> int:
        """
        Delete records whose expiry is at or before ``now``.

        :returns: Number of records removed.
        """


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh-token store used in unit tests.

    .. note::
       Uses a threading lock so concurrent flows see atomic create/delete.
    """

    def __init__(self, ttl: timedelta = REFRESH_TOKEN_LIFETIME) -> None:
        self.ttl = ttl
        self._records: dict[str, RefreshTokenRecord] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def create(self, owner_id: str) -> RefreshTokenRecord:
        with self._lock:
            # sequence never goes back, so deleted ids are never handed out again
            self._seq += 1
            record = RefreshTokenRecord(
                id=f"rt-{self._seq}",
                owner_id=str(owner_id),
                expires_at=datetime.now(UTC) + self.ttl,
            )
            self._records[record.id] = record
            return record

    def delete_by_id(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(str(record_id), None) is not None

    def get(self, record_id: str) -> RefreshTokenRecord | None:
        return self._records.get(str(record_id))

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [rid for rid, rec in self._records.items() if rec.is_expired(now)]
            for rid in expired:
                del self._records[rid]
            return len(expired)

    def records_for(self, owner_id: str) -> list[RefreshTokenRecord]:
        """Return live records owned by ``owner_id`` (test helper)."""
        return [r for r in self._records.values() if r.owner_id == str(owner_id)]
