"""Command-line interface for docsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- login: Store the bearer token for the storage API
- logout: Forget the bearer token
- local: List, show, save and delete local documents
- remote: List, open, save, pull, push, migrate and delete remote files
"""

from __future__ import annotations

import logging

import click

from docsync.cli.auth import login, logout
from docsync.cli.config import (
    get_config_dir,
    get_config_file,
    get_service_config,
    load_config,
    save_config,
)
from docsync.cli.local import local
from docsync.cli.remote import remote


@click.group()
@click.version_option(package_name="docsync")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """docsync - Encrypted documents synchronized across storage backends."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Auth commands
cli.add_command(login)
cli.add_command(logout)

# Document commands
cli.add_command(local)
cli.add_command(remote)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "get_service_config",
    "load_config",
    "save_config",
]
