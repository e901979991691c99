"""Refresh token repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete

from session_tokens.models.refresh_token import RefreshToken
from session_tokens.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows."""

    model = RefreshToken

    def delete_by_id(self, record_id: int) -> bool:
        """Delete one row with a single statement.

        :returns: ``True`` when a row was removed. Concurrent deleters of the
            same id see exactly one ``True``.
        :rtype: bool
        """
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.id == record_id))
        return bool(result.rowcount)

    def delete_expired(self, now: datetime) -> int:
        """Delete rows whose ``expires_at`` is at or before ``now``."""
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.expires_at <= now))
        return int(result.rowcount or 0)
