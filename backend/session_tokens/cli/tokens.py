"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import click
from flask.cli import with_appcontext

from session_tokens.api.deps import get_refresh_store
from session_tokens.core.extensions import get_key_material

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token maintenance commands."""


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete refresh-token records whose lifetime has ended."""
    removed = get_refresh_store().purge_expired(datetime.now(UTC))
    LOGGER.info("Expired refresh tokens purged", extra={"deleted": removed})
    click.echo(f"Purged {removed} expired refresh token record(s).")


@tokens_cli.command("public-key")
@with_appcontext
def public_key() -> None:
    """Print the PEM public key that verifies refresh tokens."""
    click.echo(get_key_material().public_key_pem(), nl=False)
