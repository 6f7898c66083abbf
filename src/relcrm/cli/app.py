"""CLI app setup and common utilities.

This module creates the main Typer app and wires the services every
command shares: the profile's local store, the session, the remote record
service, the data source selector and the sync orchestrator.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import httpx
import typer
from typer import Context, Typer

from relcrm.auth import Authenticator, PasswordGrantIdentityProvider
from relcrm.config import RemoteConfig, config
from relcrm.connectors.base import ConnectorError
from relcrm.crm.adapters.base import RecordSource, RecordSourceError
from relcrm.crm.adapters.remote_service import RemoteRecordService
from relcrm.crm.collections import Collection
from relcrm.crm.data_source import DataSourceSelector
from relcrm.profile import ProfileContext
from relcrm.session import SessionContext
from relcrm.storage.local_store import LocalStore
from relcrm.sync.orchestrator import SyncOrchestrator

# Initialize Typer app
app = Typer(
    name="relcrm",
    help="Relationship CRM: contacts, companies and tasks, offline or synced to the cloud.",
)


# =============================================================================
# Global Context Object
# =============================================================================


class CLIState:
    """Shared state object for CLI commands.

    Services are built once per invocation by ``open()``. Tests pass a
    pre-built state (with an httpx transport) through ``CliRunner.invoke(obj=...)``.
    """

    def __init__(
        self,
        remote: Optional[RemoteConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.remote = remote or config.remote
        self.transport = transport
        self.profile: Optional[ProfileContext] = None
        self.store: Optional[LocalStore] = None
        self.session: Optional[SessionContext] = None
        self.remote_service: Optional[RemoteRecordService] = None
        self.selector: Optional[DataSourceSelector] = None
        self.sync: Optional[SyncOrchestrator] = None
        self.authenticator: Optional[Authenticator] = None

    def open(self, profile_dir: Path) -> None:
        """Open the profile and build the services around it."""
        if self.store is not None:
            return

        self.profile = ProfileContext(profile_dir)
        self.profile.ensure_directories()
        self.store = LocalStore.for_profile(self.profile)
        self.session = SessionContext(self.store)

        if self.remote.is_configured:
            self.remote_service = RemoteRecordService.for_session(
                self.session, self.remote, transport=self.transport
            )

        self.selector = DataSourceSelector(self.session, self.store, self.remote_service)
        self.authenticator = Authenticator(
            PasswordGrantIdentityProvider.from_config(self.remote, transport=self.transport),
            self.remote_service,
            self.session,
        )
        self.session.restore()

        # Attached after restore: the prompt is offered on sign-in, not on startup
        self.sync = SyncOrchestrator(
            self.store,
            self.remote_service,
            self.session,
            on_complete=self.selector.invalidate_all,
        ).attach()

    def close(self) -> None:
        """Release the store and session observers."""
        if self.sync is not None:
            self.sync.detach()
        if self.selector is not None:
            self.selector.close()
        if self.store is not None:
            self.store.close()


def get_state(ctx: Context) -> CLIState:
    """Get the opened CLI state from the Typer context.

    Raises:
        RuntimeError: If called before the app callback.
    """
    if isinstance(ctx.obj, CLIState) and ctx.obj.store is not None:
        return ctx.obj
    raise RuntimeError("CLI state not initialized - this is a bug")


def get_source(ctx: Context, collection: Collection) -> RecordSource:
    """Record source for a collection, exiting with a message if unavailable."""
    state = get_state(ctx)
    try:
        return state.selector.source(collection)
    except RuntimeError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn record source and remote errors into a message and exit code 1."""
    try:
        yield
    except RecordSourceError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    except ConnectorError as e:
        typer.echo(f"❌ Remote error: {e}", err=True)
        raise typer.Exit(1)


def configure_logging(level: str) -> None:
    """Send relcrm log records to stderr at the given level."""
    logger = logging.getLogger("relcrm")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


@app.callback()
def init_app(
    ctx: Context,
    profile: Optional[Path] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Profile directory holding local data (default: ~/.relcrm)",
    ),
):
    """Initialize the application with optional profile selection.

    Signed out, every command works on the profile's local data. Signed in,
    commands read and write the remote record service.
    """
    configure_logging(config.log_level)

    ctx.ensure_object(CLIState)
    ctx.obj.open(profile or config.profile_dir)
    ctx.call_on_close(ctx.obj.close)
