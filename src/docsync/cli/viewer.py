"""Terminal stand-in for the document editor.

The CLI has no editing engine: documents opened from the terminal are
printed, and the last one opened is what gets serialized for upload.
"""

from __future__ import annotations

import click

from docsync.sync.opener import OpenResult, OpenStatus, ProtectedFileOpener


class TerminalEditor:
    """Editor that echoes loaded documents and serializes the last one."""

    def __init__(self, echo: bool = True) -> None:
        self.name: str | None = None
        self.bill_type: int | None = None
        self._content = ""
        self._echo = echo

    def serialize_current(self) -> str:
        return self._content

    def load_document(self, name: str, content: str, bill_type: int) -> None:
        self.name = name
        self.bill_type = bill_type
        self._content = content
        if self._echo:
            click.echo(content)


def prompt_for_password(opener: ProtectedFileOpener, result: OpenResult) -> OpenResult:
    """Ask for the password until the pending file opens or input is empty."""
    while result.status is not OpenStatus.OPENED:
        click.echo(result.message, err=True)
        password = click.prompt(
            "Password (leave empty to cancel)",
            hide_input=True,
            default="",
            show_default=False,
        )
        if not password:
            opener.cancel()
            return result
        result = opener.submit_password(password)
    return result
