"""Flask CLI commands for refresh-token ledger maintenance."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import click
from flask import current_app
from flask.cli import with_appcontext

from bandsync.services._shared.errors import StorageError
from bandsync.services._shared.ports import RefreshTokenLedger
from bandsync.uow import SQLAlchemyReadOnlyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _ledger() -> RefreshTokenLedger:
    return current_app.extensions["session_manager"].ledger


@click.group("ledger")
def ledger_cli() -> None:
    """Inspect and maintain the refresh-token ledger."""


@ledger_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete ledger records whose refresh token has expired."""
    try:
        removed = _ledger().purge_expired(datetime.now(UTC))
    except StorageError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    LOGGER.info("Purged expired refresh tokens", extra={"event": "ledger.purge", "status": removed})
    click.echo(f"Removed {removed} expired refresh token(s).")


@ledger_cli.command("show")
@click.argument("email")
@with_appcontext
def show_command(email: str) -> None:
    """Show the live refresh-token record for EMAIL (token value is masked)."""
    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        user = uow.users.get_by_email(email)
        user_id = user.id if user is not None else None
    if user_id is None:
        raise click.ClickException(f"No user with email {email!r}.")

    try:
        records = _ledger().list_for_user(user_id)
    except StorageError as exc:
        raise click.ClickException(f"Lookup failed: {exc}") from exc
    if not records:
        click.echo(f"{email}: no live session")
        return
    for record in records:
        click.echo(
            f"{email}: token=...{record.token[-8:]}  "
            f"created_at={record.created_at.isoformat()}  "
            f"expires_at={record.expires_at.isoformat()}"
        )
