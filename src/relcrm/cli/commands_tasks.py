"""Task CLI commands.

Commands:
- tasks list: List tasks, incomplete first, with search and filters
- tasks add: Create a task, optionally linked to a contact
- tasks update: Edit a task (unspecified fields are kept)
- tasks toggle: Flip a task between completed and pending
- tasks delete: Delete a task
"""

from __future__ import annotations

from typing import Optional

import typer
from typer import Context, Typer

from relcrm.cli.app import app, get_source, reporting_errors
from relcrm.crm.adapters.base import RecordNotFoundError, RecordSource
from relcrm.crm.collections import Collection
from relcrm.crm.models import Contact, Task, TaskPriority, TaskType
from relcrm.crm.queries import filter_tasks, is_overdue, sort_tasks
from relcrm.crm.workflows import build_task, toggle_task_completion

tasks_app = Typer(help="Manage tasks")
app.add_typer(tasks_app, name="tasks")

# Clears the contact link on update
NO_CONTACT = "none"


def _render_task(task: Task) -> None:
    """Render one task to terminal."""
    mark = "✅" if task.completed else "⬜"
    typer.echo(f"  {mark} [{task.id}] {task.title} ({task.priority.value}, {task.type.value})")
    if task.due_date:
        overdue = " ⚠️ Overdue" if is_overdue(task) else ""
        typer.echo(f"      Due: {task.due_date}{overdue}")
    if task.contact_name:
        who = task.contact_name
        if task.company_name:
            who = f"{who} ({task.company_name})"
        typer.echo(f"      Contact: {who}")
    if task.description:
        typer.echo(f"      {task.description}")


def _lookup_contact(contacts: RecordSource, contact_id: str) -> Contact:
    contact = contacts.get(contact_id)
    if contact is None:
        raise RecordNotFoundError(Collection.CONTACTS, contact_id)
    return contact


@tasks_app.command(name="list")
def tasks_list(
    ctx: Context,
    search: str = typer.Option("", "--search", "-s", help="Match title, description or contact"),
    status: str = typer.Option("all", "--status", help="all, pending or completed"),
    priority: str = typer.Option("all", "--priority", help="all, low, medium or high"),
):
    """List tasks, incomplete first, each group by due date.

    Examples:
        relcrm tasks list --status pending
        relcrm tasks list --priority high --search call
    """
    if status not in ("all", "pending", "completed"):
        typer.echo(f"❌ Unknown status filter: {status}", err=True)
        typer.echo("   Valid values: all, pending, completed")
        raise typer.Exit(1)

    source = get_source(ctx, Collection.TASKS)
    with reporting_errors():
        tasks = sort_tasks(
            filter_tasks(source.list(), search=search, status=status, priority=priority)
        )

    typer.echo(f"\n📋 Tasks ({len(tasks)}):")
    for task in tasks:
        _render_task(task)


@tasks_app.command(name="add")
def tasks_add(
    ctx: Context,
    title: str = typer.Option(..., "--title", help="Task title"),
    due_date: str = typer.Option(..., "--due", help="Due date, YYYY-MM-DD"),
    description: str = typer.Option("", "--description", "-d"),
    task_type: TaskType = typer.Option(TaskType.CALL, "--type", "-t"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority"),
    contact_id: Optional[str] = typer.Option(None, "--contact-id", help="Link to a contact"),
):
    """Create a task.

    The linked contact's name and company are copied onto the task.

    Example:
        relcrm tasks add --title "Send proposal" --due 2026-11-01 --contact-id 1760875200123
    """
    task = Task(
        title=title,
        description=description,
        type=task_type,
        priority=priority,
        due_date=due_date,
    )

    source = get_source(ctx, Collection.TASKS)
    with reporting_errors():
        contact = None
        if contact_id:
            contact = _lookup_contact(get_source(ctx, Collection.CONTACTS), contact_id)
        created = source.create(build_task(task, contact))

    typer.echo(f"✅ Created task [{created.id}] {created.title}")


@tasks_app.command(name="update")
def tasks_update(
    ctx: Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    title: Optional[str] = typer.Option(None, "--title"),
    due_date: Optional[str] = typer.Option(None, "--due"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    task_type: Optional[TaskType] = typer.Option(None, "--type", "-t"),
    priority: Optional[TaskPriority] = typer.Option(None, "--priority"),
    contact_id: Optional[str] = typer.Option(
        None, "--contact-id", help=f"Relink to a contact ('{NO_CONTACT}' to unlink)"
    ),
):
    """Edit a task. The full record is written back.

    Completion is changed with `tasks toggle`, never here.
    """
    source = get_source(ctx, Collection.TASKS)
    with reporting_errors():
        task = source.get(task_id)
        if task is None:
            raise RecordNotFoundError(Collection.TASKS, task_id)

        given = {
            "title": title,
            "due_date": due_date,
            "description": description,
            "type": task_type,
            "priority": priority,
        }
        updated = task.model_copy(update={k: v for k, v in given.items() if v is not None})

        if contact_id == NO_CONTACT:
            updated = build_task(updated, None)
        elif contact_id:
            contact = _lookup_contact(get_source(ctx, Collection.CONTACTS), contact_id)
            updated = build_task(updated, contact)

        stored = source.update(task_id, updated)

    typer.echo(f"✅ Updated task [{stored.id}] {stored.title}")


@tasks_app.command(name="toggle")
def tasks_toggle(
    ctx: Context,
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Mark a task completed, or back to pending."""
    source = get_source(ctx, Collection.TASKS)
    with reporting_errors():
        task = toggle_task_completion(source, task_id)

    state = "completed" if task.completed else "pending"
    typer.echo(f"✅ Task [{task.id}] {task.title} is now {state}")


@tasks_app.command(name="delete")
def tasks_delete(
    ctx: Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a task permanently."""
    if not yes and not typer.confirm(f"Delete task {task_id}?"):
        typer.echo("Cancelled.")
        raise typer.Exit(0)

    source = get_source(ctx, Collection.TASKS)
    with reporting_errors():
        source.delete(task_id)

    typer.echo(f"🗑️ Deleted task {task_id}")
