"""Dashboard CLI command.

Each collection is read on its own; when one remote read fails the others
are still shown, with a warning for the one that could not be loaded.
"""

from __future__ import annotations

from typing import List

import typer
from typer import Context

from relcrm.cli.app import app, get_source, get_state
from relcrm.connectors.base import ConnectorError
from relcrm.crm.collections import Collection
from relcrm.crm.queries import dashboard_stats


def _read(ctx: Context, collection: Collection, failed: List[str]) -> list:
    try:
        return get_source(ctx, collection).list()
    except ConnectorError as e:
        failed.append(f"{collection.value}: {e}")
        return []


@app.command(name="dashboard")
def dashboard(ctx: Context):
    """Show totals, recent contacts and upcoming tasks.

    Example:
        relcrm dashboard
    """
    state = get_state(ctx)
    failed: List[str] = []

    contacts = _read(ctx, Collection.CONTACTS, failed)
    companies = _read(ctx, Collection.COMPANIES, failed)
    tasks = _read(ctx, Collection.TASKS, failed)
    stats = dashboard_stats(contacts, companies, tasks)

    mode = "cloud" if state.session.is_active else "local"
    typer.echo(f"[data: {mode}]")
    typer.echo("\n📊 Dashboard:")
    typer.echo(f"   Contacts:           {stats.total_contacts}")
    typer.echo(f"   Companies:          {stats.total_companies}")
    typer.echo(f"   Active tasks:       {stats.active_tasks}")
    typer.echo(f"   New this month:     {stats.contacts_this_month}")

    typer.echo(f"\n👤 Recent contacts ({len(stats.recent_contacts)}):")
    for contact in stats.recent_contacts:
        company = f" - {contact.company}" if contact.company else ""
        typer.echo(f"  [{contact.id}] {contact.full_name}{company}")

    typer.echo(f"\n📅 Upcoming tasks ({len(stats.upcoming_tasks)}):")
    for task in stats.upcoming_tasks:
        typer.echo(f"  [{task.id}] {task.due_date} {task.title} ({task.priority.value})")

    for message in failed:
        typer.echo(f"\n⚠️ Could not load {message}", err=True)
