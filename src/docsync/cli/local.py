"""Local document commands for docsync CLI.

Commands:
- local list: List documents in the local store
- local show: Print a document, prompting for its password if protected
- local save: Store a text file as a document
- local delete: Delete a document from the local store
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from docsync.cli.config import get_service_config
from docsync.cli.viewer import TerminalEditor, prompt_for_password
from docsync.core.errors import DocsyncError
from docsync.local.store import Document, LocalStore
from docsync.sync.opener import ProtectedFileOpener


def open_store() -> LocalStore:
    """Open the local store configured for this user."""
    config = get_service_config()
    return LocalStore(config.local_db_path, persist_passwords=config.persist_passwords)


@click.group()
def local() -> None:
    """Manage documents in the local store."""


@local.command("list")
def list_cmd() -> None:
    """List local documents with their last modification time."""
    with open_store() as store:
        files = store.list_all()
        if not files:
            click.echo("No local documents.")
            return
        for name in sorted(files):
            marker = "*" if store.is_file_protected(name) else " "
            click.echo(f"{marker} {name}  {files[name]}")


@local.command()
@click.argument("name")
def show(name: str) -> None:
    """Print a local document.

    Protected documents ask for their password; a correct password is
    remembered so the document can later be uploaded without asking again.
    """
    with open_store() as store:
        opener = ProtectedFileOpener(store, TerminalEditor())
        try:
            result = opener.open_local(name)
        except DocsyncError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        result = prompt_for_password(opener, result)
        if not result.opened:
            sys.exit(1)


@local.command()
@click.argument("name")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--password", default=None, help="Protect the document with a password.")
@click.option("--bill-type", type=int, default=1, show_default=True, help="Editor tag.")
def save(name: str, source: Path, password: str | None, bill_type: int) -> None:
    """Store the content of SOURCE as document NAME."""
    document = Document.new(name, source.read_text(), bill_type=bill_type, password=password)
    with open_store() as store:
        try:
            store.save(document)
        except DocsyncError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    suffix = " (password protected)" if password else ""
    click.echo(f"Saved {name}{suffix}.")


@local.command()
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def delete(name: str, yes: bool) -> None:
    """Delete a local document."""
    with open_store() as store:
        if not store.check_exists(name):
            click.echo(f"Error: No local document named {name}.", err=True)
            sys.exit(1)
        if not yes and not click.confirm(f"Do you want to delete the {name} file?"):
            sys.exit(0)
        store.delete(name)
        if store.get_last_opened() == name:
            store.clear_last_opened()
    click.echo(f"Deleted {name}.")
