"""Contact CLI commands.

Commands:
- contacts list: List contacts, with search and status filter
- contacts show: Show one contact with its activity history
- contacts add: Create a contact
- contacts update: Edit a contact (unspecified fields are kept)
- contacts delete: Delete a contact
- contacts add-activity: Log an activity against a contact
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import typer
from typer import Context, Typer

from relcrm.cli.app import app, get_source, reporting_errors
from relcrm.crm.adapters.base import RecordNotFoundError
from relcrm.crm.collections import Collection
from relcrm.crm.models import (
    ActivityType,
    Address,
    Contact,
    ContactStatus,
    PreferredContact,
)
from relcrm.crm.queries import filter_contacts
from relcrm.crm.workflows import add_activity, parse_tags

contacts_app = Typer(help="Manage contacts")
app.add_typer(contacts_app, name="contacts")


def _render_contact(contact: Contact, detailed: bool = False) -> None:
    """Render one contact to terminal."""
    typer.echo(f"  [{contact.id}] {contact.full_name or 'Unknown'} ({contact.status.value})")
    if contact.position or contact.company:
        role = " at ".join(part for part in (contact.position, contact.company) if part)
        typer.echo(f"      {role}")
    if contact.email:
        typer.echo(f"      Email: {contact.email}")
    if contact.phone:
        typer.echo(f"      Phone: {contact.phone}")
    if contact.tags:
        typer.echo(f"      Tags: {', '.join(contact.tags)}")
    if not detailed:
        return

    if contact.address:
        parts = [
            contact.address.street,
            contact.address.city,
            contact.address.state,
            contact.address.zip_code,
            contact.address.country,
        ]
        typer.echo(f"      Address: {', '.join(p for p in parts if p)}")
    for label, value in (
        ("Birthday", contact.birthday),
        ("Website", contact.website),
        ("LinkedIn", contact.linked_in),
        ("Twitter", contact.twitter),
        ("Lead source", contact.lead_source),
        ("Preferred contact", contact.preferred_contact.value if contact.preferred_contact else None),
        ("Last contact", contact.last_contact),
        ("Notes", contact.notes),
    ):
        if value:
            typer.echo(f"      {label}: {value}")

    typer.echo(f"\n📋 Activities ({len(contact.activities)}):")
    for activity in contact.activities:
        typer.echo(f"  {activity.date} [{activity.type.value}] {activity.description}")


def _address(
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str],
    country: Optional[str],
    current: Optional[Address] = None,
) -> Optional[Address]:
    given = {
        "street": street,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "country": country,
    }
    changes = {k: v for k, v in given.items() if v is not None}
    if not changes:
        return current
    return (current or Address()).model_copy(update=changes)


@contacts_app.command(name="list")
def contacts_list(
    ctx: Context,
    search: str = typer.Option("", "--search", "-s", help="Match name, email or company"),
    status: str = typer.Option("all", "--status", help="all, active, inactive or lead"),
):
    """List contacts.

    Examples:
        relcrm contacts list
        relcrm contacts list --search acme --status lead
    """
    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        contacts = filter_contacts(source.list(), search=search, status=status)

    typer.echo(f"\n👤 Contacts ({len(contacts)}):")
    for contact in contacts:
        _render_contact(contact)


@contacts_app.command(name="show")
def contacts_show(
    ctx: Context,
    contact_id: str = typer.Argument(..., help="Contact ID"),
):
    """Show a contact with its activity history."""
    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        contact = source.get(contact_id)
    if contact is None:
        typer.echo(f"❌ Contact not found: {contact_id}", err=True)
        raise typer.Exit(1)
    _render_contact(contact, detailed=True)


@contacts_app.command(name="add")
def contacts_add(
    ctx: Context,
    first_name: str = typer.Option(..., "--first-name", help="First name"),
    last_name: str = typer.Option(..., "--last-name", help="Last name"),
    email: str = typer.Option(..., "--email", help="Email address"),
    phone: str = typer.Option("", "--phone"),
    company: str = typer.Option("", "--company", help="Company name"),
    position: str = typer.Option("", "--position"),
    tags: str = typer.Option("", "--tags", help="Comma-separated tags"),
    notes: str = typer.Option("", "--notes"),
    status: ContactStatus = typer.Option(ContactStatus.LEAD, "--status"),
    birthday: Optional[str] = typer.Option(None, "--birthday", help="YYYY-MM-DD"),
    website: Optional[str] = typer.Option(None, "--website"),
    linked_in: Optional[str] = typer.Option(None, "--linkedin"),
    twitter: Optional[str] = typer.Option(None, "--twitter"),
    lead_source: Optional[str] = typer.Option(None, "--lead-source"),
    preferred_contact: Optional[PreferredContact] = typer.Option(None, "--preferred-contact"),
    street: Optional[str] = typer.Option(None, "--street"),
    city: Optional[str] = typer.Option(None, "--city"),
    state: Optional[str] = typer.Option(None, "--state"),
    zip_code: Optional[str] = typer.Option(None, "--zip"),
    country: Optional[str] = typer.Option(None, "--country"),
):
    """Create a contact.

    Example:
        relcrm contacts add --first-name Ada --last-name Lovelace --email ada@example.com
    """
    contact = Contact(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        company=company,
        position=position,
        tags=parse_tags(tags),
        notes=notes,
        status=status,
        birthday=birthday,
        website=website,
        linked_in=linked_in,
        twitter=twitter,
        lead_source=lead_source,
        preferred_contact=preferred_contact,
        address=_address(street, city, state, zip_code, country),
    )

    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        created = source.create(contact)

    typer.echo(f"✅ Created contact [{created.id}] {created.full_name}")


@contacts_app.command(name="update")
def contacts_update(
    ctx: Context,
    contact_id: str = typer.Argument(..., help="Contact ID"),
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    email: Optional[str] = typer.Option(None, "--email"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    company: Optional[str] = typer.Option(None, "--company"),
    position: Optional[str] = typer.Option(None, "--position"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma-separated tags (replaces)"),
    notes: Optional[str] = typer.Option(None, "--notes"),
    status: Optional[ContactStatus] = typer.Option(None, "--status"),
    birthday: Optional[str] = typer.Option(None, "--birthday"),
    website: Optional[str] = typer.Option(None, "--website"),
    linked_in: Optional[str] = typer.Option(None, "--linkedin"),
    twitter: Optional[str] = typer.Option(None, "--twitter"),
    lead_source: Optional[str] = typer.Option(None, "--lead-source"),
    preferred_contact: Optional[PreferredContact] = typer.Option(None, "--preferred-contact"),
    street: Optional[str] = typer.Option(None, "--street"),
    city: Optional[str] = typer.Option(None, "--city"),
    state: Optional[str] = typer.Option(None, "--state"),
    zip_code: Optional[str] = typer.Option(None, "--zip"),
    country: Optional[str] = typer.Option(None, "--country"),
):
    """Edit a contact. The full record is written back.

    Example:
        relcrm contacts update 1760875200123 --status active
    """
    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        contact = source.get(contact_id)
        if contact is None:
            raise RecordNotFoundError(Collection.CONTACTS, contact_id)

        given: Dict[str, Any] = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": phone,
            "company": company,
            "position": position,
            "tags": parse_tags(tags) if tags is not None else None,
            "notes": notes,
            "status": status,
            "birthday": birthday,
            "website": website,
            "linked_in": linked_in,
            "twitter": twitter,
            "lead_source": lead_source,
            "preferred_contact": preferred_contact,
        }
        changes = {k: v for k, v in given.items() if v is not None}
        changes["address"] = _address(street, city, state, zip_code, country, contact.address)

        updated = source.update(contact_id, contact.model_copy(update=changes))

    typer.echo(f"✅ Updated contact [{updated.id}] {updated.full_name}")


@contacts_app.command(name="delete")
def contacts_delete(
    ctx: Context,
    contact_id: str = typer.Argument(..., help="Contact ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a contact permanently."""
    if not yes and not typer.confirm(f"Delete contact {contact_id}?"):
        typer.echo("Cancelled.")
        raise typer.Exit(0)

    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        source.delete(contact_id)

    typer.echo(f"🗑️ Deleted contact {contact_id}")


@contacts_app.command(name="add-activity")
def contacts_add_activity(
    ctx: Context,
    contact_id: str = typer.Argument(..., help="Contact ID"),
    activity_type: ActivityType = typer.Option(ActivityType.NOTE, "--type", "-t"),
    description: str = typer.Option(..., "--description", "-d"),
    date: Optional[str] = typer.Option(None, "--date", help="YYYY-MM-DD (default: today)"),
):
    """Log an activity against a contact.

    Example:
        relcrm contacts add-activity 1760875200123 --type call -d "Intro call"
    """
    source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        try:
            contact = add_activity(source, contact_id, activity_type, description, date=date)
        except ValueError as e:
            typer.echo(f"❌ {e}", err=True)
            raise typer.Exit(1)

    typer.echo(f"✅ Logged {activity_type.value} for {contact.full_name}")
