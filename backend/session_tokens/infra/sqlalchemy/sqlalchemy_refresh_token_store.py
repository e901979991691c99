# session_tokens/infra/sqlalchemy/sqlalchemy_refresh_token_store.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import InterfaceError, OperationalError

from session_tokens.core.constants import REFRESH_TOKEN_LIFETIME
from session_tokens.models.refresh_token import RefreshToken
from session_tokens.services._shared.base import BaseService
from session_tokens.services._shared.errors import StoreUnavailableError
from session_tokens.services._shared.ports import RefreshTokenRecord, RefreshTokenStore

# Connection-level failures; anything else is a programming error and propagates
_UNAVAILABLE = (OperationalError, InterfaceError)


def _aware(dt: datetime) -> datetime:
    # SQLite drops tzinfo on round-trip
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=str(row.id),
        owner_id=str(row.user_id),
        expires_at=_aware(row.expires_at),
    )


class SQLAlchemyRefreshTokenStore(BaseService, RefreshTokenStore):
    """
    Refresh token store backed by the ``refresh_tokens`` table.

    Every call runs in its own unit of work so a record is committed before
    the token referencing it is signed.
    """

    def __init__(self, *, ttl: timedelta = REFRESH_TOKEN_LIFETIME) -> None:
        super().__init__()
        self.ttl = ttl

    def create(self, owner_id: str) -> RefreshTokenRecord:
        try:
            with self.rw_uow() as uow:
                row = uow.refresh_tokens.add(
                    RefreshToken(user_id=int(owner_id), expires_at=self.now_utc() + self.ttl)
                )
                record = _to_record(row)
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError() from exc
        return record

    def delete_by_id(self, record_id: str) -> bool:
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return False
        try:
            with self.rw_uow() as uow:
                return uow.refresh_tokens.delete_by_id(key)
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError() from exc

    def get(self, record_id: str) -> RefreshTokenRecord | None:
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return None
        try:
            with self.ro_uow() as uow:
                row = uow.refresh_tokens.get(key)
                return _to_record(row) if row is not None else None
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError() from exc

    def purge_expired(self, now: datetime) -> int:
        try:
            with self.rw_uow() as uow:
                return uow.refresh_tokens.delete_expired(now)
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError() from exc
