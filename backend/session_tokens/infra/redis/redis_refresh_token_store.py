"""Refresh-token records kept in Redis.

Layout
------
``rt:seq``
    Counter handing out record ids (``INCR``); it only grows, so an id is
    never reused after its record is deleted.
``rt:<id>``
    Hash with ``owner_id`` and ``expires_at`` (epoch seconds), expiring with
    the record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from session_tokens.core.constants import REFRESH_TOKEN_LIFETIME
from session_tokens.services._shared.errors import StoreUnavailableError
from session_tokens.services._shared.ports import RefreshTokenRecord, RefreshTokenStore

KEY_PREFIX = "rt:"
COUNTER_KEY = f"{KEY_PREFIX}seq"


def _text(raw: bytes | str | None) -> str | None:
    if isinstance(raw, bytes | bytearray):
        return raw.decode()
    return raw


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    :class:`RefreshTokenStore` on a connected Redis client.

    Every Redis failure surfaces as :class:`StoreUnavailableError`.

    :param r: Redis client.
    :param ttl: Lifetime of new records.
    """

    r: redis.Redis
    ttl: timedelta = REFRESH_TOKEN_LIFETIME

    def create(self, owner_id: str) -> RefreshTokenRecord:
        expires_at = datetime.now(UTC) + self.ttl
        try:
            record_id = str(self.r.incr(COUNTER_KEY))
            key = KEY_PREFIX + record_id
            with self.r.pipeline(transaction=True) as pipe:
                pipe.hset(
                    key,
                    mapping={"owner_id": str(owner_id), "expires_at": int(expires_at.timestamp())},
                )
                pipe.expire(key, max(1, int(self.ttl.total_seconds())))
                pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableError() from exc
        return RefreshTokenRecord(id=record_id, owner_id=str(owner_id), expires_at=expires_at)

    def get(self, record_id: str) -> RefreshTokenRecord | None:
        try:
            fields = self.r.hgetall(KEY_PREFIX + str(record_id))
        except RedisError as exc:
            raise StoreUnavailableError() from exc
        if not fields:
            return None
        expires_ts = int(_text(fields.get(b"expires_at")) or 0)
        return RefreshTokenRecord(
            id=str(record_id),
            owner_id=_text(fields.get(b"owner_id")) or "",
            expires_at=datetime.fromtimestamp(expires_ts, tz=UTC),
        )

    def delete_by_id(self, record_id: str) -> bool:
        """Remove the record; ``True`` only for the caller whose ``DEL`` hit it."""
        try:
            return self.r.delete(KEY_PREFIX + str(record_id)) > 0
        except RedisError as exc:
            raise StoreUnavailableError() from exc

    def purge_expired(self, now: datetime) -> int:
        """Sweep records past ``expires_at`` that lost their TTL (e.g. restored snapshots)."""
        cutoff = int(now.timestamp())
        removed = 0
        try:
            for key in self.r.scan_iter(match=f"{KEY_PREFIX}[0-9]*"):
                expires_ts = _text(self.r.hget(key, "expires_at"))
                if expires_ts is not None and int(expires_ts) <= cutoff:
                    removed += self.r.delete(key)
        except RedisError as exc:
            raise StoreUnavailableError() from exc
        return removed
