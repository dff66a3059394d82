"""Flask CLI commands for token housekeeping."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from taskmanager.services.auth.sweep import TokenSweeper

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh and verification token maintenance."""


@tokens_cli.command("sweep")
@click.option("--verbose", is_flag=True, help="Enable debug logging for the sweep.")
@with_appcontext
def sweep_command(verbose: bool) -> None:
    """Delete expired or revoked refresh tokens and expired or used verification tokens."""
    if verbose:
        logging.getLogger("taskmanager.services.auth.sweep").setLevel(logging.DEBUG)
    sweeper: TokenSweeper = current_app.extensions["token_sweeper"]
    result = sweeper.sweep_once()
    click.echo("Sweep summary:")
    click.echo(f"  refresh_tokens       deleted={result.refresh_deleted:>4}")
    click.echo(f"  verification_tokens  deleted={result.verification_deleted:>4}")
