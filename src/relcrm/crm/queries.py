"""List filtering, sorting and dashboard statistics.

Pure functions over record lists; they never touch a record source.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Sequence

from relcrm.crm.ids import parse_timestamp
from relcrm.crm.models import Company, Contact, Task

ALL = "all"

# Sorts after every parseable due date
_NO_DUE_DATE = datetime.max.replace(tzinfo=timezone.utc)


def _matches(term: str, *values: Optional[str]) -> bool:
    needle = term.lower()
    return any(needle in (value or "").lower() for value in values)


# =============================================================================
# Contacts
# =============================================================================


def filter_contacts(
    contacts: Sequence[Contact],
    search: str = "",
    status: str = ALL,
) -> List[Contact]:
    """Contacts matching a search term and status.

    The term is matched case-insensitively against first name, last name,
    email and company.
    """
    return [
        contact
        for contact in contacts
        if _matches(search, contact.first_name, contact.last_name, contact.email, contact.company)
        and (status == ALL or contact.status.value == status)
    ]


# =============================================================================
# Companies
# =============================================================================


def filter_companies(
    companies: Sequence[Company],
    search: str = "",
    status: str = ALL,
) -> List[Company]:
    """Companies whose name or industry matches the term, with the given status."""
    return [
        company
        for company in companies
        if _matches(search, company.name, company.industry)
        and (status == ALL or company.status.value == status)
    ]


def contacts_by_company(contacts: Sequence[Contact]) -> Dict[str, int]:
    """Number of contacts per company name (as typed on the contact)."""
    return dict(Counter(contact.company for contact in contacts if contact.company))


def company_contacts(company: Company, contacts: Sequence[Contact]) -> List[Contact]:
    """Contacts whose company name equals the company's name."""
    return [contact for contact in contacts if contact.company == company.name]


# =============================================================================
# Tasks
# =============================================================================


def filter_tasks(
    tasks: Sequence[Task],
    search: str = "",
    status: str = ALL,
    priority: str = ALL,
) -> List[Task]:
    """Tasks matching a search term, completion state and priority.

    ``status`` is one of ``all``, ``pending`` (not completed) or
    ``completed``, judged by the ``completed`` flag.
    """
    if status not in (ALL, "pending", "completed"):
        raise ValueError(f"Unknown task status filter: {status!r}")

    def status_matches(task: Task) -> bool:
        if status == "completed":
            return task.completed
        if status == "pending":
            return not task.completed
        return True

    return [
        task
        for task in tasks
        if _matches(search, task.title, task.description, task.contact_name)
        and status_matches(task)
        and (priority == ALL or task.priority.value == priority)
    ]


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    """Whether an open task's due date is before today (UTC)."""
    due = parse_timestamp(task.due_date)
    if task.completed or due is None:
        return False
    return due.date() < (today or datetime.now(timezone.utc).date())


def sort_tasks(tasks: Sequence[Task]) -> List[Task]:
    """Incomplete tasks first, each group ordered by due date."""
    return sorted(
        tasks,
        key=lambda task: (task.completed, parse_timestamp(task.due_date) or _NO_DUE_DATE),
    )


# =============================================================================
# Dashboard
# =============================================================================


@dataclass
class DashboardStats:
    """Headline numbers and short lists for the dashboard."""

    total_contacts: int = 0
    total_companies: int = 0
    active_tasks: int = 0
    contacts_this_month: int = 0
    recent_contacts: List[Contact] = field(default_factory=list)
    upcoming_tasks: List[Task] = field(default_factory=list)


def dashboard_stats(
    contacts: Sequence[Contact],
    companies: Sequence[Company],
    tasks: Sequence[Task],
    now: Optional[datetime] = None,
    limit: int = 5,
) -> DashboardStats:
    """Compute dashboard statistics.

    Args:
        contacts: Readable contacts
        companies: Readable companies
        tasks: Readable tasks
        now: Reference time for "this month" (defaults to current UTC time)
        limit: Length of the recent-contacts and upcoming-tasks lists

    Returns:
        DashboardStats
    """
    now = now or datetime.now(timezone.utc)

    def created_this_month(contact: Contact) -> bool:
        created = parse_timestamp(contact.created_at)
        return created is not None and (created.year, created.month) == (now.year, now.month)

    dated_contacts = [c for c in contacts if parse_timestamp(c.created_at) is not None]
    recent = sorted(dated_contacts, key=lambda c: parse_timestamp(c.created_at), reverse=True)

    open_tasks = [t for t in tasks if not t.completed]
    upcoming = sorted(
        (t for t in open_tasks if parse_timestamp(t.due_date) is not None),
        key=lambda t: parse_timestamp(t.due_date),
    )

    return DashboardStats(
        total_contacts=len(contacts),
        total_companies=len(companies),
        active_tasks=len(open_tasks),
        contacts_this_month=sum(1 for c in contacts if created_this_month(c)),
        recent_contacts=recent[:limit],
        upcoming_tasks=upcoming[:limit],
    )
