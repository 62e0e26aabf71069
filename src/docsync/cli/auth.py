"""Sign-in commands for docsync CLI.

Commands:
- login: Store the bearer token for the storage API
- logout: Forget the bearer token
"""

from __future__ import annotations

import sys

import click
from keyring.errors import KeyringError

from docsync.cli.config import get_credentials, load_config, save_config


@click.command()
@click.option("--token", default=None, help="Bearer token (prompted if omitted).")
@click.option(
    "--api-url",
    default=None,
    help="Storage API base URL (e.g., https://api.example.com).",
)
def login(token: str | None, api_url: str | None) -> None:
    """Sign in to the storage API.

    The token is kept in the system keyring and sent with every call to a
    networked backend.
    """
    if token is None:
        token = click.prompt("Bearer token", hide_input=True)
    token = token.strip()
    if not token:
        click.echo("Error: Token cannot be empty.", err=True)
        sys.exit(1)

    if api_url:
        config = load_config()
        config["api_base_url"] = api_url.rstrip("/")
        save_config(config)

    try:
        get_credentials().store_token(token)
    except KeyringError as e:
        click.echo(f"Error: Could not store token: {e}", err=True)
        sys.exit(1)
    click.echo("Signed in.")


@click.command()
def logout() -> None:
    """Forget the stored bearer token."""
    get_credentials().clear()
    click.echo("Signed out.")
