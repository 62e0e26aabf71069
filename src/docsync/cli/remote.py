"""Remote backend commands for docsync CLI.

Commands:
- remote list: List files on a backend
- remote open: Print a remote file without storing it
- remote save: Upload a local document under a (new) name
- remote pull: Move remote files into the local store
- remote push: Move local documents to a backend
- remote migrate: Copy files from one backend to another
- remote delete: Delete a file from a backend
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

import click
import httpx

from docsync.cli.config import get_credentials, get_service_config
from docsync.cli.local import open_store
from docsync.cli.viewer import TerminalEditor, prompt_for_password
from docsync.core.errors import DocsyncError
from docsync.core.types import Backend
from docsync.remote.repository import create_repository
from docsync.sync.conflicts import Resolution
from docsync.sync.messages import describe_error
from docsync.sync.opener import ProtectedFileOpener
from docsync.sync.orchestrator import SyncOrchestrator
from docsync.sync.types import BatchResult, DocumentEditor, PendingBatch

T = TypeVar("T")

BACKEND_CHOICE = click.Choice([backend.value for backend in Backend], case_sensitive=False)
CONFLICT_CHOICE = click.Choice(["ask", "skip", "overwrite", "cancel"], case_sensitive=False)

# Errors a remote command reports and exits on
COMMAND_ERRORS = (DocsyncError, httpx.HTTPError)


@asynccontextmanager
async def open_orchestrator(
    editor: DocumentEditor | None = None,
) -> AsyncIterator[SyncOrchestrator]:
    """Wire the local store, the repository and the orchestrator."""
    config = get_service_config()
    store = open_store()
    repository = create_repository(config, get_credentials())
    orchestrator = SyncOrchestrator(store, repository, editor)
    try:
        yield orchestrator
    finally:
        orchestrator.close()
        await repository.aclose()
        store.close()


def _run(coro: Coroutine[Any, Any, T], backend: Backend, action: str) -> T:
    """Run a command coroutine, reporting errors and exiting non-zero."""
    try:
        return asyncio.run(coro)
    except COMMAND_ERRORS as e:
        click.echo(f"Error: {describe_error(e, backend, action)}", err=True)
        sys.exit(1)


def _format_millis(millis: int) -> str:
    if not millis:
        return "-"
    return datetime.fromtimestamp(millis / 1000, UTC).strftime("%Y-%m-%d %H:%M:%S")


def _choose_resolution(pending: PendingBatch, on_conflict: str) -> Resolution | None:
    if not pending.needs_resolution:
        return None
    click.echo(pending.conflicts.message.split(".")[0] + ":")
    for name in pending.conflicts:
        click.echo(f"  {name}")
    if on_conflict == "ask":
        on_conflict = click.prompt(
            "Resolve conflicts",
            type=click.Choice(["skip", "overwrite", "cancel"]),
            default="skip",
        )
    return Resolution(on_conflict)


async def _resolve_and_run(
    orchestrator: SyncOrchestrator, pending: PendingBatch, on_conflict: str
) -> BatchResult | None:
    """Ask for a resolution if needed, then run the batch or discard it."""
    resolution = _choose_resolution(pending, on_conflict.lower())
    if resolution is Resolution.CANCEL:
        orchestrator.discard_pending()
        return None
    return await orchestrator.run(pending, resolution)


def _report(result: BatchResult | None) -> None:
    if result is None:
        click.echo("Cancelled.")
        return
    click.echo(result.message)
    for name in result.failed:
        click.echo(f"  {name}: {result.errors.get(name, 'failed')}", err=True)
    if not result.ok:
        sys.exit(1)


@click.group()
def remote() -> None:
    """Work with files on the remote backends."""


@remote.command("list")
@click.argument("backend", type=BACKEND_CHOICE)
@click.option("--filter", "term", default="", help="Only show names containing TERM.")
def list_cmd(backend: str, term: str) -> None:
    """List files stored on BACKEND (protected files are marked with *)."""
    target = Backend(backend.lower())

    async def _list() -> None:
        async with open_orchestrator() as orchestrator:
            await orchestrator.open_backend(target)
            files = orchestrator.filter_files(term)
            if not files:
                click.echo(f"No files in {target.display_name}.")
                return
            for name in sorted(files):
                ref = files[name]
                marker = "*" if ref.password_protected else " "
                click.echo(f"{marker} {name}  {_format_millis(ref.last_modified)}")

    _run(_list(), target, "load files from")


@remote.command("open")
@click.argument("backend", type=BACKEND_CHOICE)
@click.argument("name")
def open_cmd(backend: str, name: str) -> None:
    """Print remote file NAME, prompting for its password if protected."""
    source = Backend(backend.lower())

    async def _open() -> bool:
        async with open_orchestrator() as orchestrator:
            listing = await orchestrator.open_backend(source)
            opener = ProtectedFileOpener(
                orchestrator.local, TerminalEditor(), orchestrator.repository
            )
            result = await opener.open_remote(source, name, listing.is_protected(name))
            return prompt_for_password(opener, result).opened

    if not _run(_open(), source, "open file from"):
        sys.exit(1)


@remote.command()
@click.argument("backend", type=BACKEND_CHOICE)
@click.argument("local_name")
@click.option("--as", "target_name", default=None, help="Remote name (default: LOCAL_NAME).")
def save(backend: str, local_name: str, target_name: str | None) -> None:
    """Upload local document LOCAL_NAME to BACKEND.

    Protected documents are opened with their password first and encrypted
    again before upload.
    """
    target = Backend(backend.lower())
    editor = TerminalEditor(echo=False)

    async def _save() -> bool:
        async with open_orchestrator(editor) as orchestrator:
            opener = ProtectedFileOpener(orchestrator.local, editor)
            opened = prompt_for_password(opener, opener.open_local(local_name))
            if not opened.opened:
                return False
            await orchestrator.open_backend(target)
            outcome = await orchestrator.upload_current(
                target_name or local_name,
                current_file=local_name,
                password=opened.password,
            )
            click.echo(outcome.message, err=not outcome.success)
            return outcome.success

    if not _run(_save(), target, "save file to"):
        sys.exit(1)


@remote.command()
@click.argument("backend", type=BACKEND_CHOICE)
@click.argument("names", nargs=-1)
@click.option("--on-conflict", type=CONFLICT_CHOICE, default="ask", show_default=True)
def pull(backend: str, names: tuple[str, ...], on_conflict: str) -> None:
    """Move files from BACKEND into the local store (all files if no NAMES)."""
    source = Backend(backend.lower())

    async def _pull() -> BatchResult | None:
        async with open_orchestrator() as orchestrator:
            await orchestrator.open_backend(source)
            if not names:
                orchestrator.select_all()
            pending = orchestrator.prepare_move_to_local(names or None)
            return await _resolve_and_run(orchestrator, pending, on_conflict)

    _report(_run(_pull(), source, "download files from"))


@remote.command()
@click.argument("backend", type=BACKEND_CHOICE)
@click.argument("names", nargs=-1)
@click.option("--on-conflict", type=CONFLICT_CHOICE, default="ask", show_default=True)
def push(backend: str, names: tuple[str, ...], on_conflict: str) -> None:
    """Move local documents to BACKEND (all documents if no NAMES)."""
    target = Backend(backend.lower())

    async def _push() -> BatchResult | None:
        async with open_orchestrator() as orchestrator:
            await orchestrator.open_backend(target)
            if not names:
                orchestrator.select_all_local()
            pending = orchestrator.prepare_move_to_server(names or None)
            return await _resolve_and_run(orchestrator, pending, on_conflict)

    _report(_run(_push(), target, "save files to"))


@remote.command()
@click.argument("source", type=BACKEND_CHOICE)
@click.argument("target", type=BACKEND_CHOICE)
@click.argument("names", nargs=-1)
@click.option("--on-conflict", type=CONFLICT_CHOICE, default="ask", show_default=True)
def migrate(source: str, target: str, names: tuple[str, ...], on_conflict: str) -> None:
    """Copy files from SOURCE to TARGET (all files if no NAMES)."""
    from_backend = Backend(source.lower())
    to_backend = Backend(target.lower())

    async def _migrate() -> BatchResult | None:
        async with open_orchestrator() as orchestrator:
            await orchestrator.open_backend(from_backend)
            if not names:
                orchestrator.select_all()
            pending = await orchestrator.prepare_migration(to_backend, names or None)
            return await _resolve_and_run(orchestrator, pending, on_conflict)

    _report(_run(_migrate(), to_backend, "migrate files to"))


@remote.command()
@click.argument("backend", type=BACKEND_CHOICE)
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def delete(backend: str, name: str, yes: bool) -> None:
    """Delete file NAME from BACKEND."""
    target = Backend(backend.lower())
    if not yes and not click.confirm(
        f"Do you want to delete the {name} file from {target.display_name}?"
    ):
        sys.exit(0)

    async def _delete() -> bool:
        async with open_orchestrator() as orchestrator:
            await orchestrator.open_backend(target)
            outcome = await orchestrator.delete(name, confirmed=True)
            click.echo(outcome.message, err=not outcome.success)
            return outcome.success

    if not _run(_delete(), target, "delete file from"):
        sys.exit(1)
