"""Company CLI commands.

Commands:
- companies list: List companies with their contact counts
- companies add: Create a company
- companies update: Edit a company (unspecified fields are kept)
- companies delete: Delete a company
"""

from __future__ import annotations

from typing import Optional

import typer
from typer import Context, Typer

from relcrm.cli.app import app, get_source, reporting_errors
from relcrm.crm.adapters.base import RecordNotFoundError
from relcrm.crm.collections import Collection
from relcrm.crm.models import Company, CompanySize, CompanyStatus
from relcrm.crm.queries import contacts_by_company, filter_companies

companies_app = Typer(help="Manage companies")
app.add_typer(companies_app, name="companies")


@companies_app.command(name="list")
def companies_list(
    ctx: Context,
    search: str = typer.Option("", "--search", "-s", help="Match name or industry"),
    status: str = typer.Option("all", "--status", help="all, prospect, active, inactive or partner"),
):
    """List companies with the number of contacts at each.

    Contacts are counted by the company name typed on the contact.
    """
    companies_source = get_source(ctx, Collection.COMPANIES)
    contacts_source = get_source(ctx, Collection.CONTACTS)
    with reporting_errors():
        companies = filter_companies(companies_source.list(), search=search, status=status)
        counts = contacts_by_company(contacts_source.list())

    typer.echo(f"\n🏢 Companies ({len(companies)}):")
    for company in companies:
        typer.echo(
            f"  [{company.id}] {company.name} ({company.status.value}, {company.size.value})"
        )
        if company.industry:
            typer.echo(f"      Industry: {company.industry}")
        location = ", ".join(part for part in (company.city, company.country) if part)
        if location:
            typer.echo(f"      Location: {location}")
        typer.echo(f"      Contacts: {counts.get(company.name, 0)}")


@companies_app.command(name="add")
def companies_add(
    ctx: Context,
    name: str = typer.Option(..., "--name", help="Company name"),
    industry: str = typer.Option("", "--industry"),
    website: str = typer.Option("", "--website"),
    phone: str = typer.Option("", "--phone"),
    email: str = typer.Option("", "--email"),
    address: str = typer.Option("", "--address"),
    city: str = typer.Option("", "--city"),
    country: str = typer.Option("", "--country"),
    size: CompanySize = typer.Option(CompanySize.SMALL, "--size"),
    status: CompanyStatus = typer.Option(CompanyStatus.PROSPECT, "--status"),
    notes: str = typer.Option("", "--notes"),
):
    """Create a company.

    Example:
        relcrm companies add --name Acme --industry Manufacturing --size medium
    """
    company = Company(
        name=name,
        industry=industry,
        website=website,
        phone=phone,
        email=email,
        address=address,
        city=city,
        country=country,
        size=size,
        status=status,
        notes=notes,
    )

    source = get_source(ctx, Collection.COMPANIES)
    with reporting_errors():
        created = source.create(company)

    typer.echo(f"✅ Created company [{created.id}] {created.name}")


@companies_app.command(name="update")
def companies_update(
    ctx: Context,
    company_id: str = typer.Argument(..., help="Company ID"),
    name: Optional[str] = typer.Option(None, "--name"),
    industry: Optional[str] = typer.Option(None, "--industry"),
    website: Optional[str] = typer.Option(None, "--website"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    email: Optional[str] = typer.Option(None, "--email"),
    address: Optional[str] = typer.Option(None, "--address"),
    city: Optional[str] = typer.Option(None, "--city"),
    country: Optional[str] = typer.Option(None, "--country"),
    size: Optional[CompanySize] = typer.Option(None, "--size"),
    status: Optional[CompanyStatus] = typer.Option(None, "--status"),
    notes: Optional[str] = typer.Option(None, "--notes"),
):
    """Edit a company. The full record is written back."""
    source = get_source(ctx, Collection.COMPANIES)
    with reporting_errors():
        company = source.get(company_id)
        if company is None:
            raise RecordNotFoundError(Collection.COMPANIES, company_id)

        given = {
            "name": name,
            "industry": industry,
            "website": website,
            "phone": phone,
            "email": email,
            "address": address,
            "city": city,
            "country": country,
            "size": size,
            "status": status,
            "notes": notes,
        }
        changes = {k: v for k, v in given.items() if v is not None}
        updated = source.update(company_id, company.model_copy(update=changes))

    typer.echo(f"✅ Updated company [{updated.id}] {updated.name}")


@companies_app.command(name="delete")
def companies_delete(
    ctx: Context,
    company_id: str = typer.Argument(..., help="Company ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a company permanently. Contacts naming it are left as they are."""
    if not yes and not typer.confirm(f"Delete company {company_id}?"):
        typer.echo("Cancelled.")
        raise typer.Exit(0)

    source = get_source(ctx, Collection.COMPANIES)
    with reporting_errors():
        source.delete(company_id)

    typer.echo(f"🗑️ Deleted company {company_id}")
