"""Command-line interface for mailsync.

Drives the sync engine against a running mail backend. Mutations go through
the optimistic coordinator with a console-backed view, so the optimistic step
and any revert are printed as they happen.

Usage:
    python -m mailsync validate-config
    python -m mailsync read AAMkAGI...
    python -m mailsync flag AAMkAGI... --color orange
    python -m mailsync move AAMkAGI... --folder archive
    python -m mailsync thread 42
    python -m mailsync merge ID1 ID2 --title "Q3 budget"
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, get_args

import click
from rich.console import Console
from rich.table import Table

from mailsync.config import validate_config_file
from mailsync.core.errors import MailSyncError
from mailsync.core.logging import configure_logging
from mailsync.models import FlagColor, MailFolder
from mailsync.service.client import MailServiceClient
from mailsync.sync.mutations import OptimisticMutationCoordinator

console = Console()


class ConsoleView:
    """OptimisticView that prints each callback instead of updating a list."""

    def __init__(self, out: Console):
        self.out = out

    def apply_update(self, email_id: str, patch: dict[str, Any]) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in patch.items())
        self.out.print(f"[dim]… {email_id}: {fields}[/dim]")

    def apply_remove(self, email_id: str) -> None:
        self.out.print(f"[dim]… {email_id}: removed from view[/dim]")

    def restore(self, email_id: str) -> None:
        self.out.print(f"[yellow]↺[/yellow] {email_id}: restored, refetch to reconcile")

    def current(self, email_id: str, field: str) -> Any:
        return None


def _build_client() -> MailServiceClient:
    from mailsync.auth.session import EnvTokenProvider
    from mailsync.config import get_config

    config = get_config()
    return MailServiceClient.from_config(config, EnvTokenProvider(config.auth.token_env_var))


async def _with_coordinator(
    action: Callable[[OptimisticMutationCoordinator], Awaitable[dict[str, Any]]],
) -> dict[str, Any]:
    async with _build_client() as client:
        coordinator = OptimisticMutationCoordinator(client, view=ConsoleView(console))
        return await action(coordinator)


def _run_mutation(
    action: Callable[[OptimisticMutationCoordinator], Awaitable[dict[str, Any]]],
    done: str,
) -> None:
    """Run one mutation, print the outcome and exit non-zero on failure."""
    try:
        asyncio.run(_with_coordinator(action))
    except MailSyncError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] {done}")


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug logging")
def cli(debug: bool) -> None:
    """mailsync - optimistic mail actions against the mail backend."""
    log_level = "DEBUG" if debug else "WARNING"
    # Use human-readable output for CLI
    configure_logging(log_level=log_level, json_output=False)


@cli.command("validate-config")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file (default: config/config.yaml)",
)
def validate_config(config_path: Path | None) -> None:
    """Validate the configuration file."""
    console.print(f"Validating config: [cyan]{config_path or 'config/config.yaml'}[/cyan]")

    is_valid, message = validate_config_file(config_path)

    if is_valid:
        console.print(f"\n[green]✓[/green] {message}")
        sys.exit(0)
    console.print(f"\n[red]✗[/red] {message}")
    sys.exit(1)


@cli.command("read")
@click.argument("email_id")
def read(email_id: str) -> None:
    """Mark an email as read."""
    _run_mutation(lambda c: c.mark_as_read(email_id), f"{email_id} marked as read")


@cli.command("unread")
@click.argument("email_id")
def unread(email_id: str) -> None:
    """Mark an email as unread."""
    _run_mutation(lambda c: c.mark_as_unread(email_id), f"{email_id} marked as unread")


@cli.command("flag")
@click.argument("email_id")
@click.option(
    "--color",
    type=click.Choice(list(get_args(FlagColor))),
    default="red",
    show_default=True,
    help="Flag colour",
)
def flag(email_id: str, color: FlagColor) -> None:
    """Flag an email."""
    _run_mutation(lambda c: c.add_flag(email_id, color), f"{email_id} flagged {color}")


@cli.command("unflag")
@click.argument("email_id")
def unflag(email_id: str) -> None:
    """Remove the flag from an email."""
    _run_mutation(lambda c: c.remove_flag(email_id), f"{email_id} unflagged")


@cli.command("move")
@click.argument("email_id")
@click.option(
    "--folder",
    required=True,
    help=f"Destination folder ({', '.join(get_args(MailFolder))} or a folder id)",
)
def move(email_id: str, folder: str) -> None:
    """Move an email to a folder."""
    _run_mutation(lambda c: c.move_to_folder(email_id, folder), f"{email_id} moved to {folder}")


@cli.command("archive")
@click.argument("email_id")
def archive(email_id: str) -> None:
    """Archive an email."""
    _run_mutation(lambda c: c.archive(email_id), f"{email_id} archived")


@cli.command("junk")
@click.argument("email_id")
def junk(email_id: str) -> None:
    """Move an email to junk."""
    _run_mutation(lambda c: c.move_to_junk(email_id), f"{email_id} moved to junk")


@cli.command("trash")
@click.argument("email_id")
def trash(email_id: str) -> None:
    """Move an email to deleted items."""
    _run_mutation(lambda c: c.move_to_trash(email_id), f"{email_id} moved to trash")


@cli.command("delete")
@click.argument("email_id")
@click.confirmation_option(prompt="Permanently delete this email?")
def delete(email_id: str) -> None:
    """Permanently delete an email."""
    _run_mutation(lambda c: c.delete_email(email_id), f"{email_id} deleted")


@cli.command("threads")
def threads() -> None:
    """List custom threads."""
    from mailsync.service.threads import ThreadService

    async def _list() -> list:
        async with _build_client() as client:
            return await ThreadService(client).list_threads()

    try:
        result = asyncio.run(_list())
    except MailSyncError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    table = Table(title="Custom threads")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Items", justify="right")
    table.add_column("Emails", justify="right")
    table.add_column("Last activity")
    for row in result:
        table.add_row(
            row.id,
            row.title or "(untitled)",
            str(row.item_count),
            str(row.email_count),
            row.last_activity.strftime("%Y-%m-%d %H:%M") if row.last_activity else "",
        )
    console.print(table)


@cli.command("thread")
@click.argument("thread_id")
def thread(thread_id: str) -> None:
    """Show the items of one custom thread."""
    from mailsync.models import Thread
    from mailsync.service.threads import ThreadService

    async def _get() -> Thread:
        async with _build_client() as client:
            return await ThreadService(client).get_thread(thread_id)

    try:
        result = asyncio.run(_get())
    except MailSyncError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    console.print(f"[bold]{result.title or '(untitled)'}[/bold] [dim]{result.id}[/dim]")
    for item in result.items:
        if item.removed_at is not None:
            continue
        if item.kind == "email":
            sender = item.from_name or item.from_email or ""
            console.print(f"  [cyan]✉[/cyan] {item.subject or '(no subject)'} [dim]{sender}[/dim]")
        elif item.kind == "divider":
            console.print("  [dim]────────[/dim]")
        else:
            console.print(f"  [yellow]{item.kind}[/yellow] {item.content or ''}")

    email_ids = result.email_ids()
    console.print(f"\n{len(email_ids)} email(s): {', '.join(email_ids)}")


@cli.command("merge")
@click.argument("email_ids", nargs=-1, required=True)
@click.option("--title", default=None, help="Thread title (new threads default to the first subject)")
@click.option("--into", "target_thread_id", default=None, help="Merge into an existing thread id")
def merge(email_ids: tuple[str, ...], title: str | None, target_thread_id: str | None) -> None:
    """Merge emails into a custom thread."""
    from mailsync.service.threads import MergeResult, ThreadService
    from mailsync.sync.merge_dialog import MergeDialogCoordinator, commit_merge
    from mailsync.sync.threads import ThreadAssociationTracker

    dialog = MergeDialogCoordinator()
    dialog.open(email_ids, target_thread_id=target_thread_id, default_title=title)

    async def _merge() -> MergeResult:
        async with _build_client() as client:
            return await commit_merge(dialog, ThreadService(client), ThreadAssociationTracker())

    try:
        result = asyncio.run(_merge())
    except MailSyncError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    console.print(
        f"[green]✓[/green] Thread [cyan]{result.thread.id}[/cyan] "
        f"({result.thread.title or 'untitled'}): {len(result.added)} added"
    )
    if result.skipped:
        console.print(f"[yellow]Skipped:[/yellow] {', '.join(result.skipped)}")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
