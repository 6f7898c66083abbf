"""Sync CLI commands.

Commands:
- sync run: Upload local data to the cloud (manual trigger)
- sync status: Show local record counts and whether the prompt was offered
- sync reset-prompt: Offer the sign-in sync prompt again
"""

from __future__ import annotations

import typer
from typer import Context, Typer

from relcrm.cli.app import app, get_state
from relcrm.sync.orchestrator import SyncCounts, SyncOrchestrator, SyncState

sync_app = Typer(help="Sync local data to the cloud")
app.add_typer(sync_app, name="sync")


def _render_counts(counts: SyncCounts) -> None:
    typer.echo(f"   Contacts:  {counts.contacts}")
    typer.echo(f"   Companies: {counts.companies}")
    typer.echo(f"   Tasks:     {counts.tasks}")


def _report_progress(value: int) -> None:
    typer.echo(f"   ... {value}%")


def run_confirmation(orchestrator: SyncOrchestrator, assume_yes: bool = False) -> None:
    """Drive an open sync prompt to completion on the terminal.

    Asks before uploading, then offers a retry after each failure.

    Raises:
        typer.Exit: With code 1 if the sync failed and was abandoned.
    """
    counts = orchestrator.pending_counts()
    typer.echo(f"\n☁️ Found {counts.total} items in local storage:")
    _render_counts(counts)

    if not assume_yes and not typer.confirm("Sync them to the cloud?", default=True):
        orchestrator.decline()
        typer.echo("Skipped. Run 'relcrm sync run' to sync later.")
        return

    orchestrator.on_progress = _report_progress
    state = orchestrator.confirm()
    while state == SyncState.FAILED:
        typer.echo(f"❌ {orchestrator.error}", err=True)
        if not typer.confirm("Retry?", default=False):
            orchestrator.abandon()
            raise typer.Exit(1)
        state = orchestrator.retry()

    typer.echo("✅ Data synced successfully! Your data is now available across all devices.")
    orchestrator.acknowledge()


@sync_app.command(name="run")
def sync_run(
    ctx: Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Sync local data to the cloud.

    Local data is left in place; the cloud decides how uploaded records
    merge with what it already holds.
    """
    state = get_state(ctx)
    if not state.session.is_active:
        typer.echo("❌ Sign in first: relcrm auth login", err=True)
        raise typer.Exit(1)

    state.sync.request_sync()
    run_confirmation(state.sync, assume_yes=yes)


@sync_app.command(name="status")
def sync_status(ctx: Context):
    """Show local data waiting to be synced."""
    state = get_state(ctx)
    counts = state.sync.pending_counts()

    typer.echo(f"\n💾 Local data ({counts.total} items):")
    _render_counts(counts)
    shown = "yes" if state.sync.has_shown_prompt() else "no"
    typer.echo(f"   Sign-in prompt offered: {shown}")


@sync_app.command(name="reset-prompt")
def sync_reset_prompt(ctx: Context):
    """Offer the sync prompt again at the next sign-in."""
    get_state(ctx).sync.reset_prompt_flag()
    typer.echo("✅ Sync prompt will be offered at the next sign-in")
