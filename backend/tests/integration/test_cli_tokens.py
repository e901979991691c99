"""Integration tests for the ``flask tokens`` command group."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from session_tokens.models import RefreshToken
from tests.factories.user import UserFactory


def test_purge_expired_removes_only_expired_records(app, session) -> None:
    user = UserFactory()
    now = datetime.now(UTC)
    session.add_all(
        [
            RefreshToken(user_id=user.id, expires_at=now - timedelta(days=1)),
            RefreshToken(user_id=user.id, expires_at=now + timedelta(days=1)),
        ]
    )
    session.commit()

    result = app.test_cli_runner().invoke(args=["tokens", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 expired refresh token record(s)." in result.output
    session.expire_all()
    assert session.query(RefreshToken).count() == 1


def test_public_key_prints_pem(app) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "public-key"])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("-----BEGIN PUBLIC KEY-----")
