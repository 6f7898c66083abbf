"""Account CLI commands.

Commands:
- auth login: Sign in (offers the one-time sync of local data)
- auth signup: Create an account and sign in
- auth logout: Sign out; local data becomes active again
- auth status: Show who is signed in
"""

from __future__ import annotations

import typer
from typer import Context, Typer

from relcrm.auth import AuthResult
from relcrm.cli.app import CLIState, app, get_state
from relcrm.cli.commands_sync import run_confirmation
from relcrm.sync.orchestrator import SyncState

auth_app = Typer(help="Sign in and out")
app.add_typer(auth_app, name="auth")


def _require_remote(state: CLIState) -> None:
    if not state.remote.auth_url:
        typer.echo("❌ Identity provider not configured. Set RELCRM_AUTH_URL.", err=True)
        raise typer.Exit(1)


def _finish_sign_in(state: CLIState, result: AuthResult, assume_yes: bool) -> None:
    if not result.success:
        typer.echo(f"❌ {result.error}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✅ Signed in as {state.session.user.display_name}")
    if state.sync.state == SyncState.CONFIRMING:
        run_confirmation(state.sync, assume_yes=assume_yes)


@auth_app.command(name="login")
def auth_login(
    ctx: Context,
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sync local data without asking"),
):
    """Sign in.

    The first sign-in on a profile that holds local data offers to sync it.
    """
    state = get_state(ctx)
    _require_remote(state)
    result = state.authenticator.sign_in(email, password)
    _finish_sign_in(state, result, assume_yes=yes)


@auth_app.command(name="signup")
def auth_signup(
    ctx: Context,
    first_name: str = typer.Option(..., "--first-name", prompt=True),
    last_name: str = typer.Option(..., "--last-name", prompt=True),
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    confirm_password: str = typer.Option(
        ..., "--confirm-password", prompt="Confirm password", hide_input=True
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sync local data without asking"),
):
    """Create an account, then sign in with it."""
    state = get_state(ctx)
    _require_remote(state)
    result = state.authenticator.sign_up(email, password, confirm_password, first_name, last_name)
    _finish_sign_in(state, result, assume_yes=yes)


@auth_app.command(name="logout")
def auth_logout(ctx: Context):
    """Sign out. Local data is used again; nothing is deleted."""
    state = get_state(ctx)
    if not state.session.is_active:
        typer.echo("Not signed in.")
        return
    state.authenticator.sign_out()
    typer.echo("✅ Signed out")


@auth_app.command(name="status")
def auth_status(ctx: Context):
    """Show the signed-in account and which data is active."""
    state = get_state(ctx)
    user = state.session.user
    if user is None:
        typer.echo("Not signed in (using local data)")
        typer.echo(f"   Profile: {state.profile.root_dir}")
        return
    typer.echo(f"Signed in as: {user.email}")
    if user.display_name != user.email:
        typer.echo(f"   Name: {user.display_name}")
    typer.echo("   Data: cloud")
